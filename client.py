"""Small synchronous client for the tracker API.

Mirrors what the desktop UI does: fetch the state on startup with
exponential backoff, then issue mutations and render the returned state.
The ``projtrack-status`` command prints the countdown and delivery history.
"""
import time
from datetime import timedelta
from typing import Any, Callable, Optional

import click
import httpx

from logs import get_logger
from models import ActiveProject, AppState
from service import delivery_stats, recent_deliveries, utc_now

API_URL = "http://localhost:3001"
MAX_RETRIES = 5
INITIAL_DELAY = 0.2

log = get_logger("client")


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def looks_like_state(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and "activeProject" in data
        and isinstance(data.get("deliveredProjects"), list)
    )


class TrackerClient:
    def __init__(
        self,
        base_url: str = API_URL,
        http: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=5.0)
        self.sleep = sleep

    def _call(self, method: str, path: str, body: Optional[dict] = None) -> AppState:
        r = self.http.request(method, path, json=body)
        if r.is_error:
            message = f"HTTP error {r.status_code}"
            try:
                message = r.json().get("error") or message
            except (ValueError, AttributeError):
                log.debug("non_json_error_body", status=r.status_code)
            raise ApiError(r.status_code, message)
        data = r.json()
        if not looks_like_state(data):
            raise ApiError(r.status_code, "Invalid state format received from server")
        return AppState.model_validate(data)

    def get_state(self) -> AppState:
        return self._call("GET", "/state")

    def start_project(self, name: str, deadline_days: int) -> AppState:
        return self._call("POST", "/start-project", {"name": name, "deadlineDays": deadline_days})

    def deliver_project(self) -> AppState:
        return self._call("POST", "/deliver-project")

    def reset_state(self) -> AppState:
        return self._call("POST", "/reset-state")

    def fetch_state_with_retry(
        self, max_retries: int = MAX_RETRIES, initial_delay: float = INITIAL_DELAY
    ) -> AppState:
        for attempt in range(max_retries):
            try:
                return self.get_state()
            except (ApiError, httpx.TransportError) as exc:
                log.warning(
                    "fetch_state_failed",
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    error=str(exc),
                )
                if attempt == max_retries - 1:
                    raise
                self.sleep(initial_delay * 2 ** attempt)
        raise ValueError("max_retries must be at least 1")


def format_countdown(project: Optional[ActiveProject], now) -> str:
    if project is None:
        return "No active project"
    left = project.remaining(now)
    if left <= timedelta(0):
        return "Deadline passed"
    seconds = int(left.total_seconds())
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    return f"{days}d {hours:02d}h {minutes:02d}m {seconds:02d}s"


@click.command()
@click.option("--url", default=API_URL, show_default=True, help="Tracker API base URL.")
@click.option("--recent", default=5, show_default=True, help="Deliveries to list.")
def status(url: str, recent: int) -> None:
    """Show the active project's countdown and the delivery history."""
    try:
        state = TrackerClient(base_url=url).fetch_state_with_retry()
    except (ApiError, httpx.TransportError) as exc:
        raise click.ClickException(f"Could not load state: {exc}")

    now = utc_now()
    active = state.active_project
    click.echo(f"Active: {active.name if active else '-'}")
    click.echo(f"Countdown: {format_countdown(active, now)}")
    stats = delivery_stats(state, now)
    click.echo(f"Delivered: {stats['total']} total, {stats['this_month']} this month")
    for project in recent_deliveries(state)[:recent]:
        click.echo(f"  {project.delivered_at:%Y-%m-%d %H:%M}  {project.name}")


if __name__ == "__main__":
    status()
