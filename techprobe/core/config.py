from pathlib import Path
from typing import Dict, Any, List, Optional
from urllib.parse import urlparse

import keyring
from keyring.errors import KeyringError
from pydantic import ValidationError

from techprobe.core.constants import DEFAULT_SUGGEST_TIMEOUT
from techprobe.core.logging import log
from techprobe.engine.models import FeatureFlags
from techprobe.utils.file_io import safe_read_json, safe_write_json


class ConfigManager:
    """Manages global configuration for TechProbe with secure key storage."""

    APP_NAME = "techprobe"
    CONFIG_DIR = Path.home() / f".{APP_NAME}"
    CONFIG_FILE = CONFIG_DIR / "config.json"
    SERVICE_NAME = "techprobe"
    PROVIDERS = ["openai", "anthropic", "openrouter", "local"]

    DEFAULT_CONFIG = {
        "provider": "openai",
        "model": "gpt-4o-mini",
        "suggest_timeout": DEFAULT_SUGGEST_TIMEOUT,
        "deep_search": {},
        "custom_patterns": [],
    }

    @classmethod
    def _key_name(cls, provider: str) -> str:
        return f"{provider}_api_key"

    @classmethod
    def ensure_config_dir(cls):
        cls.CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def migrate_from_plaintext(cls):
        """Move API keys found in config.json into the system keyring."""
        if not cls.CONFIG_FILE.exists():
            return

        data = safe_read_json(cls.CONFIG_FILE)
        migrated = False

        if data.get("api_key"):
            cls.save_api_key(data.get("provider", "openai"), data["api_key"])
            migrated = True
        data.pop("api_key", None)

        for provider in cls.PROVIDERS:
            section = data.get(provider)
            if isinstance(section, dict) and "api_key" in section:
                cls.save_api_key(provider, section.pop("api_key"))
                migrated = True

        if migrated:
            safe_write_json(cls.CONFIG_FILE, data)
            log("API keys migrated to system keyring.", level="info")

    @classmethod
    def load_config(cls) -> Dict[str, Any]:
        """Load global configuration, fetching the API key from the keyring."""
        cls.migrate_from_plaintext()

        config = cls.DEFAULT_CONFIG.copy()
        config.update(safe_read_json(cls.CONFIG_FILE, default={}))

        provider = config.get("provider", "openai")
        config["api_key"] = cls.get_api_key(provider) or ""
        return config

    @classmethod
    def save_config(cls, config: Dict[str, Any]):
        """Save global configuration; the API key goes to the keyring, never to disk."""
        cls.ensure_config_dir()
        config = dict(config)

        api_key = config.pop("api_key", None)
        if api_key:
            cls.save_api_key(config.get("provider", "openai"), api_key)

        safe_write_json(cls.CONFIG_FILE, config)

    @classmethod
    def save_api_key(cls, provider: str, api_key: str):
        try:
            keyring.set_password(cls.SERVICE_NAME, cls._key_name(provider), api_key)
        except KeyringError as e:
            log(f"Keyring save failed for {provider}: {e}", level="error")

    @classmethod
    def get_api_key(cls, provider: str) -> Optional[str]:
        try:
            return keyring.get_password(cls.SERVICE_NAME, cls._key_name(provider))
        except KeyringError as e:
            log(f"Keyring retrieval failed for {provider}: {e}", level="error")
            return None

    @classmethod
    def load_feature_flags(cls, config: Optional[Dict[str, Any]] = None) -> FeatureFlags:
        """Default deep search options with the config's ``deep_search`` overrides applied."""
        config = config if config is not None else cls.load_config()
        overrides = config.get("deep_search") or {}
        try:
            return FeatureFlags.model_validate(overrides)
        except ValidationError as e:
            log(f"Ignoring invalid deep_search settings: {e}", level="warning")
            return FeatureFlags()

    @classmethod
    def load_custom_patterns(cls, config: Optional[Dict[str, Any]] = None) -> List[str]:
        config = config if config is not None else cls.load_config()
        return [p for p in config.get("custom_patterns") or [] if isinstance(p, str) and p]

    @staticmethod
    def validate_url(url: str) -> str:
        """Accept http/https URLs with a host; raise ValueError otherwise."""
        parsed = urlparse(url)
        if not (parsed.scheme in ("http", "https") and parsed.netloc):
            raise ValueError(f"Invalid URL: '{url}' - Must be http/https with a valid domain.")
        return url

    @classmethod
    def check_ai_setup(cls) -> bool:
        config = cls.load_config()
        return bool(config.get("api_key")) or config.get("provider") == "local"
