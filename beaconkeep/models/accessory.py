"""Tracked accessory and decoded location report models."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, SecretBytes


class Accessory(BaseModel):
    """A registered tracked accessory."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    private_key: SecretBytes = SecretBytes(b"")


class LocationReport(BaseModel):
    """An already-decoded location report for one accessory."""

    model_config = ConfigDict(frozen=True)

    accessory_id: str
    timestamp: datetime
    latitude: float
    longitude: float
    confidence: int = 0
