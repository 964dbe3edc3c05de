# src/chatrelay/cli/main.py

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..backends import create_backend
from ..chat import ConsoleChat
from ..config.manager import ConfigManager, Settings
from ..config.providers import PROVIDER_CONFIGS, ProviderType
from ..utils.logs import configure_logging
from .setup import initial_setup

console = Console()

PROVIDER_CHOICE = click.Choice([p.value for p in ProviderType], case_sensitive=False)


def load_settings() -> Settings:
    """Read settings, turning bad values into a clean CLI error"""
    try:
        return Settings.from_env()
    except ValueError as e:
        console.print(f"Invalid configuration: {escape(str(e))}", style="bold red")
        raise click.Abort()


@click.group()
@click.version_option(__version__, prog_name="chatrelay")
@click.option("--log-level", help="Override LOG_LEVEL (DEBUG, INFO, WARNING...)")
@click.pass_context
def cli(ctx, log_level):
    """chatrelay - chat with a local or cloud LLM"""
    settings = load_settings()
    if log_level:
        settings.log_level = log_level.upper()
    configure_logging(settings.log_level)
    ctx.obj = settings


@cli.command()
@click.option("--provider", type=PROVIDER_CHOICE, help="Use this provider instead of the default")
@click.option("--model", help="Use this model instead of the configured one")
@click.pass_obj
def chat(settings: Settings, provider, model):
    """Chat interactively in the terminal"""
    provider_type = ProviderType(provider.lower()) if provider else settings.console_provider
    if model:
        if provider_type == ProviderType.GROQ:
            settings.groq_model = model
        else:
            settings.ollama_model = model

    backend = create_backend(provider_type, settings, console=True)
    try:
        ConsoleChat(backend, console).run()
    except Exception as e:
        console.print(f"\nChat failed: {escape(str(e))}", style="bold red")
        raise click.Abort()


@cli.command()
@click.option("--host", help="Bind address (overrides HOST)")
@click.option("--port", type=int, help="Port (overrides PORT)")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Where sessions are stored (overrides DATA_DIR)",
)
@click.option("--restore", is_flag=True, help="Load saved sessions on start")
@click.pass_obj
def serve(settings: Settings, host, port, data_dir, restore):
    """Run the HTTP session API"""
    from ..server.app import serve as run_server

    if host:
        settings.host = host
    if port:
        settings.port = port
    if data_dir:
        settings.data_dir = data_dir
    if restore:
        settings.restore_sessions = True

    console.print(
        f"✅ Backend listening on http://{settings.host}:{settings.port}",
        style="bold green",
    )
    run_server(settings)


@cli.command()
def configure():
    """Store a Groq API key and default models"""
    initial_setup()


@cli.command()
@click.pass_obj
def status(settings: Settings):
    """Show providers, models and defaults"""
    show_status(settings)


def show_status(settings: Settings):
    """Show current configuration status"""
    table = Table(title="Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Model", style="green")
    table.add_column("Endpoint", style="white")
    table.add_column("Credentials", style="yellow")
    table.add_column("Status", style="yellow")

    for provider, provider_config in PROVIDER_CONFIGS.items():
        if provider == ProviderType.GROQ:
            credentials = "set" if settings.groq_api_key else "missing"
            endpoint = provider_config.endpoint
        else:
            credentials = "not needed"
            endpoint = f"{settings.ollama_host}/api/chat"

        marks = []
        if provider == settings.default_provider:
            marks.append("SERVER DEFAULT")
        if provider == settings.console_provider:
            marks.append("CONSOLE")

        table.add_row(
            provider_config.description,
            settings.model_for(provider),
            endpoint,
            credentials,
            ", ".join(marks) or "Available",
        )

    console.print("\n🔄 chatrelay", style="bold blue")
    console.print(table)
    console.print(f"\nData directory: {settings.data_dir.resolve()}")
    console.print(f"Config directory: {ConfigManager(create=False).config_dir}")


def main():
    """Main entry point for the CLI"""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n\nOperation cancelled by user", style="yellow")
        sys.exit(1)


if __name__ == "__main__":
    main()
