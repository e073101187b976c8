"""Runtime configuration loaded from the environment (and an optional ``.env``)."""

from __future__ import annotations

import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "gpt-4o-mini"


class Settings(BaseSettings):
    """Settings for the CLI, the dashboard and the LLM assistant.

    Package settings use the ``FEEDBACK_SENTIMENT_`` prefix
    (``FEEDBACK_SENTIMENT_MODEL``, ``FEEDBACK_SENTIMENT_REPORT_ITEMS`` ...);
    provider keys keep their usual names.
    """

    model_config = SettingsConfigDict(
        env_prefix="FEEDBACK_SENTIMENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    model: str = DEFAULT_MODEL
    openai_api_key: Optional[str] = Field(default=None, validation_alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[str] = Field(default=None, validation_alias="ANTHROPIC_API_KEY")
    log_level: str = "WARNING"
    report_items: int = Field(default=30, ge=1)
    chat_items: int = Field(default=50, ge=1)

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def is_anthropic(self) -> bool:
        return self.model.startswith("claude")

    @property
    def api_key(self) -> Optional[str]:
        """Key for whichever provider ``model`` belongs to."""
        return self.anthropic_api_key if self.is_anthropic else self.openai_api_key


def get_settings(dotenv: bool = True) -> Settings:
    """Build :class:`Settings` from environment variables.

    Args:
        dotenv: Load a ``.env`` file from the working directory first, so the
            provider SDKs see the same keys.

    Raises:
        pydantic.ValidationError: If a variable has the wrong type.
    """
    if dotenv:
        load_dotenv()
        return Settings()
    return Settings(_env_file=None)


def configure_logging(level: str = "WARNING") -> None:
    """Route package logs through rich, on stderr so JSON output stays clean."""
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )
