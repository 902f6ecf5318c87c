"""Main CLI application module."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from src.userapi.api.utils.app_startup import configure_logging
from src.userapi.core.exceptions import DatabaseConnectionError
from src.userapi.core.services import DbManageService, DbSessionService
from src.userapi.runtime.config.settings import EnvironmentVariables
from src.userapi.runtime.context import get_config, load_config, set_config

console = Console()

app = typer.Typer(
    help="User API - serve the API and manage its database",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def configure(
    config_file: Path | None = typer.Option(
        None,
        "--config-file",
        "-c",
        exists=True,
        dir_okay=False,
        help="YAML configuration to use instead of CONFIG_FILE",
    ),
) -> None:
    """
    Load the configuration shared by every command.
    """
    if config_file is not None:
        set_config(load_config(EnvironmentVariables(config_file=str(config_file))))


def _connected_database_service(retries: int | None) -> DbSessionService:
    config = get_config()
    configure_logging(config)
    db_config = config.database
    if retries is not None:
        db_config = db_config.model_copy(update={"connect_retries": retries})

    console.print(f"[cyan]Connecting to {db_config.safe_connection_string}[/cyan]")
    service = DbSessionService(db_config)
    try:
        service.connect()
    except DatabaseConnectionError as e:
        service.dispose()
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(1) from None
    return service


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Bind address (defaults to config)"),
    port: int | None = typer.Option(None, help="Listen port (defaults to config)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """
    🚀 Start the HTTP server.
    """
    import uvicorn

    config = get_config()
    host = host or config.app.host
    port = port or config.app.port

    console.print(
        Panel.fit(
            f"[bold green]Serving {config.app.title} on {host}:{port}[/bold green]",
            border_style="green",
        )
    )
    uvicorn.run(
        "src.userapi.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        timeout_keep_alive=config.server.idle_timeout,
        log_config=None,
    )


@app.command("init-db")
def init_db(
    retries: int | None = typer.Option(None, help="Connection attempts before giving up"),
) -> None:
    """
    🗄️ Create the users table if it does not exist.
    """
    service = _connected_database_service(retries)
    try:
        DbManageService(service.engine).create_all()
    finally:
        service.dispose()
    console.print("[green]✅ Database initialized[/green]")


@app.command("check-db")
def check_db(
    retries: int | None = typer.Option(1, help="Connection attempts before giving up"),
) -> None:
    """
    🩺 Check database connectivity and show the pool status.
    """
    service = _connected_database_service(retries)
    try:
        status = service.get_pool_status()
    finally:
        service.dispose()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Pool", style="cyan")
    table.add_column("Value", style="green")
    for key, value in status.items():
        table.add_row(key, str(value))
    console.print("[green]✅ Database reachable[/green]")
    console.print(table)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
