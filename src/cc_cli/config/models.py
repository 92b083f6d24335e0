"""Configuration models for cc-cli using Pydantic."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Provider = Literal["gcp", "aws", "azure"]
PROVIDERS: tuple[Provider, ...] = ("gcp", "aws", "azure")

DEFAULT_MODEL = "cc-r1:8b"


class CliConfig(BaseModel):
    """User preferences stored in ``~/.cc-cli/config``."""

    model_config = ConfigDict(extra="forbid")

    default_model: str = Field(
        default=DEFAULT_MODEL,
        min_length=1,
        description="Model used when a command does not name one",
    )
    verbose: bool = Field(
        default=False,
        description="Pass --verbose to ollama run",
    )


class AuthStatus(BaseModel):
    """Which cloud providers the user has logged in to."""

    model_config = ConfigDict(extra="forbid")

    gcp: bool = False
    aws: bool = False
    azure: bool = False
    last_login: str | None = Field(
        default=None,
        description="UTC timestamp of the last login/logout, %Y-%m-%dT%H:%M:%SZ",
    )

    def is_authenticated(self, provider: Provider) -> bool:
        return bool(getattr(self, provider))
