import unittest
from unittest.mock import patch

import requests

from chucky.common.config import ExecutionContext
from chucky.common.errors import ExecutionError, SubmissionError, TransportError
from chucky.jobs.builder import build_job_request
from chucky.jobs.submission import ExecutionClient
from helpers import make_response


class TestExecutionClient(unittest.TestCase):
    def setUp(self):
        self.context = ExecutionContext(api_key="ak_live_test", worker_url="http://mock-worker")
        self.client = ExecutionClient(self.context)
        self.request = build_job_request("Summarize the repo", token="jwt-token", idempotency_key="key-1")

    @patch("requests.Session.post")
    def test_accepted_submission(self, mock_post):
        mock_post.return_value = make_response({
            "vesselId": "run_abc", "idempotencyKey": "key-1", "status": "QUEUED", "scheduledFor": "2025-01-01T00:01:00Z",
        })

        accepted = self.client.incubate(self.request)

        self.assertEqual(accepted.vessel_id, "run_abc")
        self.assertEqual(accepted.scheduled_for, "2025-01-01T00:01:00Z")
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "http://mock-worker/incubate")
        self.assertEqual(kwargs["json"]["options"]["token"], "jwt-token")
        self.assertEqual(kwargs["json"]["idempotencyKey"], "key-1")

    def test_no_bearer_header(self):
        self.assertNotIn("Authorization", self.client.session.headers)

    @patch("requests.Session.post")
    def test_embedded_message_is_a_submission_error(self, mock_post):
        mock_post.return_value = make_response({"message": "Budget exceeded", "error": "forbidden"})

        with self.assertRaises(SubmissionError) as ctx:
            self.client.incubate(self.request)
        self.assertEqual(str(ctx.exception), "Budget exceeded")

    @patch("requests.Session.post")
    def test_embedded_error_is_a_submission_error(self, mock_post):
        mock_post.return_value = make_response({"error": "Invalid token"})

        with self.assertRaises(ExecutionError) as ctx:
            self.client.incubate(self.request)
        self.assertEqual(str(ctx.exception), "Invalid token")

    @patch("requests.Session.post")
    def test_missing_job_id_uses_generic_message(self, mock_post):
        mock_post.return_value = make_response({"status": "QUEUED"})

        with self.assertRaises(SubmissionError) as ctx:
            self.client.incubate(self.request)
        self.assertEqual(str(ctx.exception), "Failed to create job")

    @patch("requests.Session.post")
    def test_transport_failures_are_not_retried(self, mock_post):
        mock_post.side_effect = requests.exceptions.Timeout("slow")

        with self.assertRaises(TransportError):
            self.client.incubate(self.request)
        self.assertEqual(mock_post.call_count, 1)

    @patch("requests.Session.post")
    def test_http_error_status(self, mock_post):
        mock_post.return_value = make_response({"error": "boom"}, status_code=502)

        with self.assertRaises(TransportError) as ctx:
            self.client.incubate(self.request)
        self.assertEqual(ctx.exception.status_code, 502)


if __name__ == '__main__':
    unittest.main()
