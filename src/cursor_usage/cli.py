"""Click CLI command definitions for cursor-usage."""

from __future__ import annotations

import logging

import click

from cursor_usage import __version__
from cursor_usage.config import Settings, load_settings


def _setup_logging(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.FileHandler(str(settings.log_file))],
    )


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="cursor-usage")
@click.pass_context
def main(ctx: click.Context) -> None:
    """cursor-usage: Show Cursor request usage for the current billing cycle.

    Run without a command to fetch and display your usage. You will be asked
    for credentials the first time, and again whenever the session expires.
    """
    settings = load_settings()
    _setup_logging(settings)
    if ctx.invoked_subcommand is not None:
        return
    from cursor_usage.flow import InteractiveFlow

    ctx.exit(InteractiveFlow(settings).run())


# --- Config commands ---

@main.group()
def config() -> None:
    """Manage configuration."""


@config.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing config")
def config_init(force: bool) -> None:
    """Create default configuration file."""
    from cursor_usage.config import init_config
    try:
        path = init_config(force=force)
        click.echo(f"Config created: {path}")
    except FileExistsError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1)


@config.command("show")
def config_show() -> None:
    """Show current configuration."""
    settings = load_settings()
    if not settings.config_file.exists():
        click.echo(f"No config file found at {settings.config_file}", err=True)
        click.echo("Run 'cursor-usage config init' to create one.", err=True)
        raise SystemExit(1)
    click.echo(settings.config_file.read_text())


# --- Offline commands ---

@main.command()
def last() -> None:
    """Show the last successfully fetched usage without contacting Cursor."""
    from cursor_usage.display import display_summary
    from cursor_usage.models import UsagePayload
    from cursor_usage.store import CredentialStore

    settings = load_settings()
    cached = CredentialStore(settings).load_cache()
    if cached is None:
        click.echo("No cached usage data. Run 'cursor-usage' first.", err=True)
        raise SystemExit(1)
    click.echo(f"Cached at {cached.timestamp:%Y-%m-%d %H:%M}\n")
    display_summary(UsagePayload.from_api(cached.data), settings.model, clear=False)


@main.command()
def logout() -> None:
    """Forget the stored session token and headers."""
    from cursor_usage.store import CredentialStore

    if CredentialStore(load_settings()).delete():
        click.echo("Stored credentials removed.")
    else:
        click.echo("No stored credentials.")
