import logging
import datetime
import json
import sys
import os

HOSTNAME = os.getenv("HOSTNAME", "unknown-host")

class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_obj = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "host": HOSTNAME,
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
            "event": getattr(record, "event", "log"), # Default to 'log' if not provided
            "job_id": getattr(record, "job_id", None)
        }
        if record.exc_info:
            log_obj["error"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)

def setup_logger(name="chucky", level=logging.INFO, stream=None):
    """
    Route the package loggers through a single JSON handler.
    Returns the named logger so callers can log straight away.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter())

    logger = logging.getLogger(name)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
