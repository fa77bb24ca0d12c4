"""
Configuration management for Trader's Journal.

Loads settings from config.yaml and environment variables.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_FILE = Path(os.getenv("TRADERSJOURNAL_CONFIG", PROJECT_ROOT / "config.yaml"))


def load_config() -> dict[str, Any]:
    """Load configuration from YAML file, layered over the defaults."""
    config = get_default_config()
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "r") as f:
            overrides = yaml.safe_load(f) or {}
        for section, values in overrides.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values
    return config


def get_default_config() -> dict[str, Any]:
    """Return default configuration if config.yaml doesn't exist."""
    return {
        "app_name": "Trader's Journal",
        "database": {
            "page_size": 1000,
        },
        "auth": {
            "session_timeout_seconds": 5.0,
            "cookie_max_age_seconds": 60 * 60 * 24 * 7,
            "secure_cookies": False,
        },
        "trades": {
            "default_currency": "AUD",
            "per_page": 50,
        },
        "announcements": {
            "batch_size": 50,
            "sender_name": "Trader's Journal",
        },
        "admin": {
            "security_event_limit": 100,
        },
        "llm": {
            "enabled": True,
            "model": "gpt-3.5-turbo",
            "max_tokens": 350,
            "temperature": 0.7,
            "max_trades": 200,
        },
    }


class Settings:
    """Application settings singleton."""

    _instance = None
    _config: dict[str, Any] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._config = load_config()
        return cls._instance

    @property
    def app_name(self) -> str:
        return self._config.get("app_name", "Trader's Journal")

    @property
    def page_size(self) -> int:
        # Environment wins so deployments can tune paging without a config file
        env_size = os.getenv("DB_PAGE_SIZE")
        if env_size:
            try:
                return max(1, int(env_size))
            except ValueError:
                pass
        return self._config.get("database", {}).get("page_size", 1000)

    @property
    def session_timeout_seconds(self) -> float:
        return self._config.get("auth", {}).get("session_timeout_seconds", 5.0)

    @property
    def cookie_max_age_seconds(self) -> int:
        return self._config.get("auth", {}).get("cookie_max_age_seconds", 604800)

    @property
    def secure_cookies(self) -> bool:
        if os.getenv("ENVIRONMENT", "").lower() == "production":
            return True
        return self._config.get("auth", {}).get("secure_cookies", False)

    @property
    def default_currency(self) -> str:
        return self._config.get("trades", {}).get("default_currency", "AUD")

    @property
    def trades_per_page(self) -> int:
        return self._config.get("trades", {}).get("per_page", 50)

    @property
    def announcement_batch_size(self) -> int:
        return self._config.get("announcements", {}).get("batch_size", 50)

    @property
    def announcement_sender_name(self) -> str:
        return self._config.get("announcements", {}).get("sender_name", self.app_name)

    @property
    def security_event_limit(self) -> int:
        return self._config.get("admin", {}).get("security_event_limit", 100)

    @property
    def llm_enabled(self) -> bool:
        return self._config.get("llm", {}).get("enabled", False)

    @property
    def llm_max_tokens(self) -> int:
        return self._config.get("llm", {}).get("max_tokens", 350)

    @property
    def llm_temperature(self) -> float:
        return self._config.get("llm", {}).get("temperature", 0.7)

    @property
    def llm_max_trades(self) -> int:
        return self._config.get("llm", {}).get("max_trades", 200)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key."""
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default


# Global settings instance
settings = Settings()


# LLM API Configuration (OpenAI-compatible)
def get_llm_api_key() -> str | None:
    """
    Get LLM API key.

    No default/fallback key is provided. OPENAI_API_KEY is accepted as an
    alternate name.
    """
    key = os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")
    key = key.strip() if key else None
    return key or None


def get_llm_base_url() -> str:
    """Get LLM base URL."""
    return os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")


def get_llm_model() -> str:
    """Get LLM model name."""
    return os.getenv("LLM_MODEL") or settings.get("llm.model", "gpt-3.5-turbo")


def get_turnstile_secret_key() -> str | None:
    """Get the Cloudflare Turnstile secret. CAPTCHA checks are skipped when unset."""
    key = os.getenv("TURNSTILE_SECRET_KEY", "").strip()
    return key or None


def get_site_url() -> str:
    """Public URL used in outgoing e-mail links."""
    return os.getenv("SITE_URL", "http://localhost:8000").rstrip("/")
