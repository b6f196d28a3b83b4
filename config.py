"""Process configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from errors import ConfigError

DEFAULT_API_BASE = "https://api.brevo.com/v3"
DEFAULT_OUTPUT_PATH = os.path.join("public", "datasets.json")
DEFAULT_PAGE_SIZE = 1000
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30


@dataclass(frozen=True, slots=True)
class Settings:
    """Settings for one pipeline run."""

    api_key: str
    api_base: str = DEFAULT_API_BASE
    output_path: str = DEFAULT_OUTPUT_PATH
    page_size: int = DEFAULT_PAGE_SIZE
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT_SECONDS


def load_settings(output_path: str | None = None) -> Settings:
    """Build Settings from environment variables.

    Raises ConfigError when BREVO_API_KEY is absent or a numeric variable
    cannot be parsed. ``output_path`` overrides OUTPUT_PATH when given.
    """
    api_key = (os.getenv("BREVO_API_KEY") or "").strip()
    if not api_key:
        raise ConfigError("BREVO_API_KEY environment variable is required")

    return Settings(
        api_key=api_key,
        api_base=os.getenv("BREVO_API_BASE", DEFAULT_API_BASE).rstrip("/"),
        output_path=output_path or os.getenv("OUTPUT_PATH", DEFAULT_OUTPUT_PATH),
        page_size=_positive_int("BREVO_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        request_timeout=_positive_int("REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS),
    )


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value
