"""Modal alert and transient notification models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AlertKind(str, Enum):
    """Every modal prompt the core can raise."""

    KEY_CREATION_ERROR = "key_creation_error"
    TOKEN_PASTE_REQUEST = "token_paste_request"
    DEPLOY_FAILED = "deploy_failed"
    DEPLOY_SUCCEEDED = "deploy_succeeded"
    DELETION_FAILED = "deletion_failed"
    NO_REPORTS_FOUND = "no_reports_found"
    DOWNLOAD_FAILED = "download_failed"
    ACTIVATE_HELPER_PROMPT = "activate_helper_prompt"
    HELPER_INSTALL_FAILED = "helper_install_failed"
    SELECT_DEPLOY_TARGET = "select_deploy_target"


class NotificationKind(str, Enum):
    """Transient, auto-dismissing notices."""

    NO_REPORTS_FOUND = "no_reports_found"


class PendingAlert(BaseModel):
    """The single modal prompt waiting for the user."""

    model_config = ConfigDict(frozen=True)

    kind: AlertKind
    description: str | None = None
    choices: tuple[str, ...] = ()
    raised_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PendingNotification(BaseModel):
    """The single transient notice currently on screen.

    ``raised_at`` and ``expires_at`` are scheduler clock readings, not wall
    time.
    """

    model_config = ConfigDict(frozen=True)

    kind: NotificationKind
    message: str = ""
    raised_at: float
    expires_at: float
