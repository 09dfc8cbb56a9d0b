from typing import Optional

import typer
from InquirerPy import inquirer

from techprobe.core.config import ConfigManager
from techprobe.core.logging import log

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-latest",
    "openrouter": "openai/gpt-4o-mini",
    "local": "llama3",
}


def setup(
    provider: Optional[str] = typer.Option(None, help="LLM provider (openai, anthropic, openrouter, local)"),
    api_key: Optional[str] = typer.Option(None, help="API key for the provider"),
    model: Optional[str] = typer.Option(None, help="Model name used for pattern suggestions"),
    suggest_timeout: Optional[float] = typer.Option(None, help="Seconds to wait for AI pattern suggestions"),
) -> None:
    """
    Configure the optional AI pattern suggester.
    """
    current_config = ConfigManager.load_config()

    # Interactive mode if arguments are missing
    if not provider:
        provider = inquirer.select(
            message="Select LLM Provider:",
            choices=ConfigManager.PROVIDERS,
            default=current_config.get("provider", "openai"),
        ).execute()
    if provider not in ConfigManager.PROVIDERS:
        log(f"Unknown provider: {provider}", level="error")
        raise typer.Exit(code=1)

    if not api_key and provider != "local":
        existing_key = current_config.get("api_key", "")
        key_masked = f"{existing_key[:4]}...{existing_key[-4:]}" if len(existing_key) > 8 else ""
        api_key = inquirer.secret(
            message=f"Enter API Key{f' (Current: {key_masked})' if key_masked else ''}:",
            default=existing_key,
            validate=lambda result: len(result) > 0 or "API Key cannot be empty",
        ).execute()

    if not model:
        default = current_config.get("model") if current_config.get("provider") == provider else None
        model = inquirer.text(
            message="Enter Model Name:",
            default=default or DEFAULT_MODELS.get(provider, ""),
        ).execute()

    new_config = {k: v for k, v in current_config.items() if k != "api_key"}
    new_config.update({"provider": provider, "model": model})
    if suggest_timeout:
        new_config["suggest_timeout"] = suggest_timeout
    if api_key:
        new_config["api_key"] = api_key
    ConfigManager.save_config(new_config)
    log("Configuration saved successfully.")
