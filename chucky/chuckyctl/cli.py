import logging
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from chucky.common.config import ExecutionContext
from chucky.common.errors import ChuckyError
from chucky.common.models.options import (
    DEFAULT_AI_BUDGET,
    DEFAULT_COMPUTE_BUDGET,
    DEFAULT_LIST_LIMIT,
    DEFAULT_MODEL,
    DEFAULT_PERMISSION_MODE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_TIMEOUT,
    MODELS,
    AdvancedOptions,
    CallbackOptions,
    CreateJobParams,
    ListOptions,
    ModelOptions,
    PollingOptions,
    ToolOptions,
)
from chucky.common.utils.logger import setup_logger
from chucky.sdk.client import ChuckyClient

app = typer.Typer(help="chuckyctl: create and manage Chucky AI agent jobs")
console = Console()

STATUS_STYLES = {
    "COMPLETED": "green",
    "FAILED": "red",
    "CANCELED": "yellow",
    "EXECUTING": "cyan",
}


class Settings:
    api_key: Optional[str] = None
    portal_url: Optional[str] = None
    worker_url: Optional[str] = None


settings = Settings()


@app.callback()
def main(
    api_key: str = typer.Option(None, envvar="CHUCKY_API_KEY", help="Chucky API key (ak_live_...)"),
    portal_url: str = typer.Option(None, envvar="CHUCKY_PORTAL_URL", help="Portal API URL"),
    worker_url: str = typer.Option(None, envvar="CHUCKY_WORKER_URL", help="Execution host URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Emit debug logs"),
):
    settings.api_key = api_key
    settings.portal_url = portal_url
    settings.worker_url = worker_url
    setup_logger("chucky", level=logging.DEBUG if verbose else logging.WARNING)


def get_client() -> ChuckyClient:
    context = ExecutionContext.from_env(
        api_key=settings.api_key,
        portal_url=settings.portal_url,
        worker_url=settings.worker_url,
    )
    return ChuckyClient(context)


def fail(message: str):
    console.print(f"[bold red]{escape(message)}[/bold red]")
    raise typer.Exit(code=1)


@app.command()
def projects():
    """List the projects this API key can run jobs in"""
    try:
        items = get_client().list_projects()
    except ChuckyError as e:
        fail(f"Error listing projects: {e}")

    table = Table(title="Projects")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Active")
    table.add_column("Description", style="dim")
    for p in items:
        table.add_row(p["id"], p["name"], "yes" if p.get("isActive") else "no", p.get("description") or "")
    console.print(table)


@app.command()
def create(
    message: str = typer.Argument(..., help="Prompt sent to the agent"),
    project: str = typer.Option(..., "--project", "-p", help="Project ID"),
    model: str = typer.Option(DEFAULT_MODEL, help=f"Model ID, one of: {', '.join(MODELS.values())}"),
    custom_model: str = typer.Option("", help="Model ID sent when --model is custom"),
    system_prompt: str = typer.Option("", help="System prompt"),
    max_turns: int = typer.Option(0, help="Maximum conversation turns (0 = unlimited)"),
    output_format: str = typer.Option("", help="JSON schema for structured output"),
    tools: str = typer.Option("", help="Tools (JSON array or comma-separated names)"),
    allowed_tools: str = typer.Option("", help="Comma-separated allowed tools"),
    disallowed_tools: str = typer.Option("", help="Comma-separated disallowed tools"),
    permission_mode: str = typer.Option(DEFAULT_PERMISSION_MODE, help="default or bypassPermissions"),
    callback_url: str = typer.Option("", help="Webhook URL for result delivery"),
    callback_secret: str = typer.Option("", help="Secret for the webhook HMAC signature"),
    user_id: str = typer.Option("", help="User ID for billing/tracking"),
    idempotency_key: str = typer.Option("", help="Idempotency key (generated when empty)"),
    ttl: int = typer.Option(0, help="Delay execution by N seconds"),
    ai_budget: float = typer.Option(DEFAULT_AI_BUDGET, help="Maximum AI spend in USD"),
    compute_budget: float = typer.Option(DEFAULT_COMPUTE_BUDGET, help="Maximum compute time in hours"),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Wait for the job to finish"),
    interval: float = typer.Option(DEFAULT_POLL_INTERVAL, help="Seconds between status checks"),
    timeout: float = typer.Option(DEFAULT_POLL_TIMEOUT, help="Seconds to wait for completion"),
):
    """Create a background AI job"""
    params = CreateJobParams(
        project_id=project,
        message=message,
        wait_for_completion=wait,
        polling_options=PollingOptions(polling_interval=interval, timeout=timeout),
        model_options=ModelOptions(
            model=model,
            custom_model=custom_model,
            system_prompt=system_prompt,
            max_turns=max_turns,
            output_format=output_format or None,
        ),
        tool_options=ToolOptions(
            tools=tools,
            allowed_tools=allowed_tools,
            disallowed_tools=disallowed_tools,
            permission_mode=permission_mode,
        ),
        callback_options=CallbackOptions(callback_url=callback_url, callback_secret=callback_secret),
        advanced_options=AdvancedOptions(
            user_id=user_id,
            idempotency_key=idempotency_key,
            ttl=ttl,
            ai_budget=ai_budget,
            compute_budget=compute_budget,
        ),
    )

    if wait:
        console.print(f"[dim]Submitting job to project {project} and waiting...[/dim]")
    try:
        result = get_client().create_job(params)
    except ChuckyError as e:
        fail(f"Job failed: {e}")

    console.print_json(data=result)
    if not wait:
        return
    if result.get("isSuccess"):
        console.print(f"[bold green]Job {result['jobId']} completed[/bold green]")
    else:
        fail(f"Job {result['jobId']} ended as {result['status']}")


@app.command()
def get(job_id: str):
    """Get the status of an existing job"""
    try:
        job = get_client().get_job(job_id)
    except ChuckyError as e:
        fail(f"Error fetching job: {e}")
    console.print_json(data=job)


@app.command()
def cancel(job_id: str):
    """Cancel a running job"""
    try:
        result = get_client().cancel_job(job_id)
    except ChuckyError as e:
        fail(f"Error canceling job: {e}")
    console.print(f"[yellow]Cancel requested for {result['jobId']}[/yellow]")


@app.command(name="list")
def list_jobs(
    status: str = typer.Option("", help="Filter by status (PENDING, QUEUED, EXECUTING, COMPLETED, FAILED, CANCELED)"),
    limit: int = typer.Option(DEFAULT_LIST_LIMIT, help="Maximum number of jobs to return"),
):
    """List recent jobs"""
    try:
        payload = get_client().list_jobs(ListOptions(status=status.upper(), limit=limit))
    except ChuckyError as e:
        fail(f"Error listing jobs: {e}")

    jobs = payload.get("jobs") or payload.get("data")
    if not isinstance(jobs, list):
        console.print_json(data=payload)
        return

    table = Table(title="Jobs")
    table.add_column("ID", style="cyan")
    table.add_column("Status")
    table.add_column("Created", style="magenta")
    table.add_column("Finished", style="magenta")
    for j in jobs:
        status_text = j.get("status", "")
        style = STATUS_STYLES.get(status_text, "white")
        table.add_row(j.get("id", ""), f"[{style}]{status_text}[/{style}]", j.get("createdAt") or "", j.get("finishedAt") or "")
    console.print(table)


if __name__ == "__main__":
    app()
