"""Main entry point for the apiqueue application.

Sets up the Typer CLI application, wires the HTTP client, the rate-limited
queue and the console display together (Composition Root), and defines the
CLI commands.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

from apiqueue.core.api_queue import ApiQueue
from apiqueue.domain.interfaces.user_interface import UserInterface
from apiqueue.domain.models.errors import ApiError, RetryLimitExceeded
from apiqueue.infrastructure.cli.display import ConsoleDisplay
from apiqueue.infrastructure.config.settings import (
    get_api_token, get_base_url, get_items_path, get_max_retries,
    get_quota_backoff, get_rate_limit_path, get_timeout, load_configuration,
)
from apiqueue.infrastructure.http.http_client import HttpApiClient
from apiqueue.infrastructure.monitoring.logger_setup import configure_logging

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="apiqueue",
    help="Call a rate-limited API without ever exceeding its quota.",
    add_completion=False,
)

# --- Dependency wiring ---

def create_dependencies(base_url: Optional[str] = None, log_level: Optional[str] = None) -> Dict[str, Any]:
    """Loads configuration, sets up logging and builds the console display."""
    load_configuration()
    configure_logging(log_level)
    return {
        'ui': ConsoleDisplay(),
        'base_url': base_url or get_base_url(),
    }

def create_client(base_url: str) -> HttpApiClient:
    return HttpApiClient(
        base_url,
        get_api_token(),
        items_path=get_items_path(),
        rate_limit_path=get_rate_limit_path(),
        timeout=get_timeout(),
    )

def create_api_queue(client: HttpApiClient) -> ApiQueue:
    return ApiQueue(client, max_retries=get_max_retries(), quota_backoff=get_quota_backoff())

def run_with_queue(ctx: typer.Context, action: Callable[[ApiQueue, UserInterface], Coroutine[Any, Any, None]]) -> None:
    """Runs an async action against a freshly wired queue, rendering API errors."""
    deps: Dict[str, Any] = ctx.obj
    ui: UserInterface = deps['ui']
    if not deps['base_url']:
        ui.display_error("No API base URL configured. Pass --base-url or set APIQUEUE_API_BASE_URL.")
        raise typer.Exit(code=2)

    async def run() -> None:
        async with create_client(deps['base_url']) as client:
            await action(create_api_queue(client), ui)

    try:
        asyncio.run(run())
    except (ApiError, RetryLimitExceeded) as e:
        logger.error(f"Command failed: {e}")
        ui.display_error(str(e))
        raise typer.Exit(code=1)

# --- CLI Commands ---

@app.command(name="rate-limit")
def rate_limit_command(ctx: typer.Context):
    """Show the remaining API quota and when it resets."""
    async def action(api: ApiQueue, ui: UserInterface) -> None:
        ui.display_quota(await api.get_rate_limit())
    run_with_queue(ctx, action)

@app.command()
def item(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Identifier of the item to fetch.")],
):
    """Fetch a single item through the paced queue."""
    async def action(api: ApiQueue, ui: UserInterface) -> None:
        ui.display_output(await api.get_item(item_id), title=f"Item {item_id}")
    run_with_queue(ctx, action)

@app.command()
def items(
    ctx: typer.Context,
    all_pages: Annotated[bool, typer.Option("--all-pages", "-a", help="Follow pagination and fetch every page.")] = False,
):
    """List items, optionally across every page."""
    async def action(api: ApiQueue, ui: UserInterface) -> None:
        if all_pages:
            result = await api.get_all_items()
        else:
            result = (await api.get_items()).data
        if not result:
            ui.display_warning("No items returned.")
            return
        ui.display_output(result, title=f"{len(result)} item(s)")
    run_with_queue(ctx, action)

@app.callback()
def main_callback(
    ctx: typer.Context,
    base_url: Annotated[Optional[str], typer.Option("--base-url", "-u", help="API root URL (overrides configuration).")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", "-l", help="Logging level, e.g. DEBUG.")] = None,
):
    """Paced access to a rate-limited item API."""
    ctx.obj = create_dependencies(base_url=base_url, log_level=log_level)

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
