"""configbridge CLI — powered by Typer."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from configbridge import __version__

app = typer.Typer(
    name="configbridge",
    help="🔐 configbridge — GitHub OAuth bridge for admin config publishing",
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
)

console = Console()

MASK = "********"


def _mask(secret: str) -> str:
    if not secret:
        return "[red](not set)[/]"
    return secret[:4] + MASK if len(secret) > 8 else MASK


def _load_or_exit():
    from configbridge.config import load_config
    from configbridge.errors import ConfigError

    try:
        return load_config()
    except ConfigError as e:
        console.print(f"[bold red]❌ {e}[/]")
        raise typer.Exit(1)


# ── Config command ──────────────────────────────────────────────────


@app.command("config")
def show_config() -> None:
    """Show the configuration resolved from the environment."""
    config = _load_or_exit()

    table = Table(title="⚙️  Effective configuration", show_lines=False)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Repository", config.repository)
    table.add_row("Default branch", config.default_branch)
    table.add_row("GitHub client id", config.github_client_id or "[red](not set)[/]")
    table.add_row("GitHub client secret", _mask(config.github_client_secret))
    table.add_row("Session secret", _mask(config.session_secret))
    table.add_row("Allowed origins", ", ".join(config.allowed_origins))
    table.add_row("Secure cookies", "yes" if config.cookie_secure else "no")
    table.add_row("GitHub API", config.github_api_url)
    table.add_row("Listen", f"{config.host}:{config.port}")

    console.print(table)


# ── Serve command ───────────────────────────────────────────────────


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Bind address (default: $HOST or 127.0.0.1)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (default: $PORT or 4000)"),
    log_level: str = typer.Option("info", "--log-level", help="uvicorn log level"),
) -> None:
    """Start the OAuth bridge server."""
    import uvicorn

    from configbridge.config import DEFAULT_SESSION_SECRET
    from configbridge.server.app import create_app

    config = _load_or_exit()
    host = host or config.host
    port = port or config.port

    console.print()
    console.print(f"[bold cyan]🔐 configbridge v{__version__}[/]")
    console.print(f"[dim]📁 Repository: {config.repository} ({config.default_branch})[/]")
    console.print(f"[dim]🌐 Allowed origins: {', '.join(config.allowed_origins)}[/]")

    if not config.oauth_configured:
        console.print(
            "[bold yellow]⚠️  GITHUB_CLIENT_ID / GITHUB_CLIENT_SECRET not set[/]\n"
            "[yellow]   /auth/exchange will fail until they are configured.[/]"
        )
    if config.session_secret == DEFAULT_SESSION_SECRET:
        console.print("[bold yellow]⚠️  SESSION_SECRET not set, using an insecure default[/]")
    if not config.cookie_secure:
        console.print("[dim]🍪 Session cookie is not Secure (set COOKIE_SECURE=1 behind HTTPS)[/]")

    console.print()
    console.print(f"[bold]🔗 Exchange:[/]    http://{host}:{port}/auth/exchange")
    console.print(f"[bold]🔗 Status:[/]      http://{host}:{port}/auth/status")
    console.print(f"[bold]🔗 Save config:[/] http://{host}:{port}/save-config")
    console.print()
    console.print("[dim]Press Ctrl+C to stop[/]")
    console.print()

    uvicorn.run(create_app(config), host=host, port=port, log_level=log_level)


# ── Version ─────────────────────────────────────────────────────────


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
) -> None:
    if version:
        console.print(f"configbridge v{__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()
