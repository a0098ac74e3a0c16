"""Authentication token model."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretBytes


class TokenProvenance(str, Enum):
    """Where a token came from."""

    DIRECT = "direct"
    HELPER = "helper"


class AuthToken(BaseModel):
    """Opaque credential for the tracking network's report service.

    The raw bytes are wrapped in ``SecretBytes`` so the token never shows up
    in reprs or log lines.
    """

    model_config = ConfigDict(frozen=True)

    raw: SecretBytes
    provenance: TokenProvenance
    acquired_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def is_empty(self) -> bool:
        return len(self.raw.get_secret_value()) == 0

    def decode(self, encoding: str = "ascii") -> str:
        """Return the token as text. Raises ``UnicodeDecodeError`` on bad bytes."""
        return self.raw.get_secret_value().decode(encoding)
