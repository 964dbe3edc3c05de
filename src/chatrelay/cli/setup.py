# src/chatrelay/cli/setup.py
from rich.console import Console
from rich.prompt import Confirm, Prompt

from ..config.manager import ConfigManager
from ..config.providers import PROVIDER_CONFIGS, ProviderType

console = Console()


def setup_provider(provider: ProviderType, config_manager: ConfigManager) -> bool:
    """Setup a specific provider

    Args:
        provider: Provider type to configure
        config_manager: Configuration manager instance

    Returns:
        bool: True if setup successful
    """
    config = PROVIDER_CONFIGS[provider]
    console.print(f"\nConfiguring {config.description}", style="bold blue")

    env_vars = {}
    for var in config.required_env_vars:
        value = Prompt.ask(f"Enter your {var}", password=True).strip()
        if not value:
            console.print(f"{var} cannot be empty", style="bold red")
            return False
        env_vars[var] = value

    current_model = config_manager.get_provider_model(provider) or config.example_model
    console.print(f"\nExample model: {config.example_model}", style="bold")
    model_name = Prompt.ask("Enter default model name", default=current_model).strip()

    if Confirm.ask("Send a test request to check this setup?", default=False):
        if not config_manager.validate_provider_setup(
            provider, model_name, env_vars.get("GROQ_API_KEY")
        ):
            console.print("❌ Configuration validation failed", style="red")
            return False

    config_manager.save_provider_config(provider, model_name, env_vars)
    return True


def initial_setup():
    """Run the interactive setup"""
    config_manager = ConfigManager()
    console.print("\n🔄 chatrelay setup", style="bold blue")
    console.print(
        "Environment variables (GROQ_API_KEY, GROQ_MODEL, OLLAMA_MODEL) "
        "take precedence over what is stored here.",
        style="dim",
    )
    console.print(
        "The console uses Groq whenever a key is available; "
        "set USE_GROQ=true to make it the server default.",
        style="dim",
    )

    configured_any = False
    while True:
        console.print("\nAvailable providers:", style="bold")
        for provider in ProviderType:
            console.print(f"  • {provider.value}: {PROVIDER_CONFIGS[provider].description}")

        provider_names = [p.value for p in ProviderType]
        selected = Prompt.ask(
            "\nWhich provider would you like to configure?",
            choices=provider_names,
            default=provider_names[0],
        )

        if setup_provider(ProviderType(selected), config_manager):
            configured_any = True
            console.print("✅  Provider configured successfully!", style="bold green")
        else:
            console.print("❌  Provider configuration failed", style="bold red")

        if not Confirm.ask("\nWould you like to configure another provider?"):
            break

    if configured_any:
        console.print("\n✨ Setup completed successfully!", style="bold green")
        console.print("\n[dim white]Example usage:[/dim white]")
        console.print("[bright_green]$[/bright_green] [white]chatrelay chat[/white]")
        console.print("[bright_green]$[/bright_green] [white]chatrelay serve --port 3001[/white]")
