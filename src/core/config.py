"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without leaking them
  into the CLI.
- Lets adapters (HTTP/Gemini) read configuration consistently.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import set_key
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GEMINI_GENERATE_CONTENT_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-1.5-flash:generateContent"
)


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "plant-id"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "plant-id"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "plant-id"
    return Path.home() / ".config" / "plant-id"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Set variables in the user's global .env, keeping unrelated lines."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    if not env_path.exists():
        env_path.write_text("# plant-id user config (.env)\n", encoding="utf-8")

    for key, value in values.items():
        if value is not None:
            set_key(env_path, key, value, quote_mode="never")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    The Gemini API key is injected from the environment or a `.env` file,
    never from source.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLANT_ID_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    gemini_api_key: str | None = Field(
        default=None,
        description="API key for the Gemini generateContent endpoint.",
    )
    gemini_base_url: str = Field(
        default=GEMINI_GENERATE_CONTENT_URL,
        min_length=8,
        description="generateContent endpoint (the key is appended as ?key=).",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for the identification request (seconds).",
    )
    user_agent: str = Field(
        default="plant-id/0.1",
        min_length=1,
        description="User-Agent sent with outbound requests.",
    )
