"""ActionGraph CLI with Rich output.

Provides commands for:
- Schema initialization
- Configuration and store status
- Inspecting user history, user lookup and next-action suggestions

Usage:
    actiongraph init-schema                 # Create constraints and indexes
    actiongraph status                      # Show configuration and health
    actiongraph history USER_ID             # Recent actions of a user
    actiongraph find-user EMAIL --env uat   # Look up a user by email
    actiongraph suggest USER_ID Mattermost post_creation
"""

import asyncio
import json
from typing import Any, Awaitable, Callable

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from actiongraph.config import Config
from actiongraph.tracker import ActionTracker

app = typer.Typer(
    name="actiongraph",
    help="ActionGraph - action tracking and recommendations",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console = Console()


def print_banner():
    """Print ActionGraph banner."""
    banner = Text()
    banner.append("Action", style="bold cyan")
    banner.append("Graph", style="cyan")
    console.print(Panel(banner, border_style="cyan", box=box.ROUNDED))


def _load_config() -> Config:
    """Load config or exit 1 when the connection settings are incomplete."""
    config = Config()
    if not config.tracking_enabled:
        console.print(
            "[red]Missing graph store configuration:[/red] "
            + ", ".join(config.missing_connection_settings)
        )
        raise typer.Exit(code=1)
    return config


def _with_tracker(operation: Callable[[ActionTracker], Awaitable[Any]]) -> Any:
    """Connect a tracker, run one operation, close it. Exit 1 on connect failure."""
    config = _load_config()

    async def _run() -> Any:
        tracker = ActionTracker.from_config(config)
        try:
            await tracker.connect()
        except Exception as e:
            console.print(f"[red]Failed to connect to {config.graph_backend}:[/red] {e}")
            raise typer.Exit(code=1)
        try:
            return await operation(tracker)
        finally:
            await tracker.close()

    return asyncio.run(_run())


def _fail_on_error(result: dict[str, Any]) -> None:
    if not result.get("success"):
        console.print(f"[red]{result.get('message', 'Operation failed')}[/red]")
        raise typer.Exit(code=1)


@app.command("init-schema")
def init_schema():
    """Connect to the graph store and create constraints and indexes.

    Safe to run repeatedly; existing schema elements are left untouched.
    """
    print_banner()
    console.print("[cyan]Initializing schema...[/cyan]")

    async def _init(tracker: ActionTracker) -> dict | None:
        return getattr(tracker.graph, "schema_summary", None)

    summary = _with_tracker(_init)
    if summary:
        console.print(
            f"  dialect={summary['dialect']}, "
            f"created={len(summary['applied'])}, "
            f"existing={len(summary['skipped'])}, "
            f"fulltext={summary['fulltext']}"
        )
    console.print("[green]✓ Schema initialized successfully.[/green]")


@app.command()
def status():
    """Show configuration and graph store health."""
    from actiongraph.db.graph_factory import get_backend_info

    print_banner()
    config = Config()
    info = get_backend_info(config)

    table = Table(title="Graph Store", box=box.ROUNDED)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Backend", info["backend"])
    table.add_row("URI", info["uri"] or "[yellow]not set[/yellow]")
    table.add_row("Database", info["database"] or "[dim]default[/dim]")
    table.add_row(
        "Tracking",
        "[green]enabled[/green]" if info["tracking_enabled"] else "[yellow]disabled[/yellow]",
    )
    if info["missing"]:
        table.add_row("Missing", ", ".join(info["missing"]))
    console.print(table)

    if not info["tracking_enabled"]:
        return

    async def _health() -> tuple[bool, str | None]:
        tracker = ActionTracker.from_config(config)
        try:
            await tracker.connect()
        except Exception as e:
            return False, str(e)
        try:
            return await tracker.health_check(), None
        finally:
            await tracker.close()

    healthy, error = asyncio.run(_health())
    if healthy:
        console.print(f"\n[bold]{info['backend']}:[/bold] [green]Healthy[/green]")
    else:
        console.print(f"\n[bold]{info['backend']}:[/bold] [red]Unhealthy[/red]")
        if error:
            console.print(f"  {error}", style="dim", markup=False)


@app.command()
def history(
    user_id: str = typer.Argument(..., help="ID of the user"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Maximum number of actions"),
):
    """Show a user's most recent actions."""

    async def _history(tracker: ActionTracker) -> dict:
        return await tracker.get_user_action_history(user_id, limit)

    result = _with_tracker(_history)
    _fail_on_error(result)

    if not result["actions"]:
        console.print(f"[yellow]No actions recorded for {user_id}.[/yellow]")
        return

    table = Table(title=f"Actions of {user_id}", box=box.ROUNDED)
    table.add_column("Timestamp", style="dim")
    table.add_column("Service", style="cyan")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("Status", justify="center")
    for entry in result["actions"]:
        action, mcp = entry["action"], entry["mcp"]
        status_str = (
            "[green]success[/green]" if action["status"] == "success" else "[red]failure[/red]"
        )
        table.add_row(
            action["timestamp"],
            mcp.get("type") or mcp["id"],
            action["type"],
            action["name"],
            status_str,
        )
    console.print(table)


@app.command("find-user")
def find_user(
    email: str = typer.Argument(..., help="Email of the user"),
    env: str = typer.Option("prod", "--env", "-e", help="Environment: uat or prod"),
):
    """Look up a tracked user by email."""
    if env not in ("uat", "prod"):
        console.print(f"[red]Invalid environment:[/red] {env} (expected uat or prod)")
        raise typer.Exit(code=1)

    async def _find(tracker: ActionTracker) -> dict:
        return await tracker.find_user_by_email(email, env)

    result = _with_tracker(_find)
    _fail_on_error(result)

    user = result["user"]
    table = Table(box=box.ROUNDED, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key in ("id", "name", "email", "team", "createdAt"):
        table.add_row(key, str(user.get(key) or "-"))
    console.print(table)


@app.command()
def suggest(
    user_id: str = typer.Argument(..., help="ID of the user"),
    mcp_type: str = typer.Argument(..., help="Type of MCP (Mattermost, Jira, ...)"),
    action_type: str = typer.Argument(..., help="Type of the current action"),
):
    """Suggest the user's likely next action."""

    async def _suggest(tracker: ActionTracker) -> dict:
        return await tracker.suggest_next_action(user_id, mcp_type, action_type, {})

    result = _with_tracker(_suggest)
    _fail_on_error(result)

    if not result["suggestions"]:
        console.print("[yellow]No follow-up actions observed.[/yellow]")
        return

    table = Table(title=f"After {action_type}", box=box.ROUNDED)
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    table.add_column("Frequency", justify="right")
    table.add_column("Sample parameters", style="dim")
    for suggestion in result["suggestions"]:
        samples = suggestion["possibleParameters"]
        table.add_row(
            suggestion["actionType"],
            suggestion["actionName"],
            str(suggestion["frequency"]),
            json.dumps(samples[0])[:60] if samples else "-",
        )
    console.print(table)


@app.command()
def version():
    """Show ActionGraph version."""
    from actiongraph import __version__

    console.print(f"ActionGraph [cyan]{__version__}[/cyan]")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
