"""
Configuration for record translation.

Values come from (lowest to highest precedence):
  1. Built-in defaults on TranslatorConfig
  2. Optional YAML file (argument or TRANSLATOR_CONFIG env var)
  3. Environment variables (a local .env file is loaded first)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError


# Environment variable -> config field
ENV_OVERRIDES: Dict[str, str] = {
    "MISTRAL_API_KEY": "api_key",
    "MISTRAL_API_URL": "api_url",
    "MISTRAL_MODEL": "model",
    "TRANSLATOR_TEMPERATURE": "temperature",
    "TRANSLATOR_RETRY_DELAYS": "retry_delays",
    "TRANSLATOR_RATE_LIMIT_DELAY": "rate_limit_delay",
    "TRANSLATOR_REQUEST_TIMEOUT": "request_timeout",
    "TRANSLATOR_DEFAULT_LOCALE": "default_locale",
    "TRANSLATOR_AVAILABLE_LOCALES": "available_locales",
}


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class TranslatorConfig(BaseModel):
    """Settings for the translation client and orchestrators."""

    # API
    api_key: Optional[str] = Field(None, description="Chat-completion API key")
    api_url: str = Field("https://api.mistral.ai", description="API base URL (no trailing path)")
    model: str = Field("mistral-small", description="Model identifier sent with every request")
    temperature: float = Field(0.3, ge=0.0, le=2.0, description="Sampling temperature")
    request_timeout: float = Field(60.0, gt=0, description="Read timeout per request (seconds)")

    # Pacing
    retry_delays: List[float] = Field(
        default_factory=lambda: [2.0, 4.0, 8.0, 16.0],
        description="Wait before each retry on HTTP 429; length is the retry count",
    )
    rate_limit_delay: float = Field(2.0, ge=0, description="Pause after each remote call (seconds)")

    # Locales
    default_locale: str = Field("en", description="Source locale when the caller gives none")
    available_locales: List[str] = Field(
        default_factory=lambda: ["en", "fr"],
        description="Locales a record may be translated into",
    )

    @field_validator("retry_delays", "available_locales", mode="before")
    @classmethod
    def _parse_csv(cls, value: Any) -> Any:
        return _split_csv(value)

    @field_validator("retry_delays")
    @classmethod
    def _non_negative_delays(cls, value: List[float]) -> List[float]:
        if any(delay < 0 for delay in value):
            raise ValueError("retry delays must be >= 0")
        return value

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def require_api_key(self) -> str:
        """Return the API key, failing fast when it is absent or blank."""
        if self.api_key is None or not self.api_key.strip():
            raise ConfigurationError(
                "MISTRAL_API_KEY is not set. Define it in your .env file or environment."
            )
        return self.api_key

    def target_locales(self, source: str) -> List[str]:
        """Available locales minus the source locale."""
        return [loc for loc in self.available_locales if loc != str(source)]


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    # Allow the settings to live under a top-level "translator" key
    return data.get("translator", data)


def load_config(
    path: Optional[str | Path] = None,
    *,
    env: Optional[Dict[str, str]] = None,
    use_dotenv: bool = True,
) -> TranslatorConfig:
    """
    Build a TranslatorConfig from defaults, an optional YAML file and env vars.

    Args:
        path: YAML file to read (falls back to TRANSLATOR_CONFIG)
        env: Environment mapping to read (defaults to os.environ)
        use_dotenv: Load a local .env file before reading the environment

    Raises:
        ConfigurationError: On unreadable files or invalid values
    """
    if use_dotenv and env is None:
        load_dotenv()
    environ = os.environ if env is None else env

    values: Dict[str, Any] = {}
    path = path or environ.get("TRANSLATOR_CONFIG")
    if path:
        values.update(_load_yaml(Path(path)))

    for var, field_name in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is not None and raw != "":
            values[field_name] = raw

    try:
        return TranslatorConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid translator configuration: {e}") from e


_config: Optional[TranslatorConfig] = None


def get_config() -> TranslatorConfig:
    """Get the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration (tests, config reloads)."""
    global _config
    _config = None
