"""Error taxonomy for the companion core.

Acquisition-path failures are recovered by the retry loop; download and
deployment failures are surfaced once. None of these terminate the process.
"""

from __future__ import annotations

from enum import Enum


class BeaconKeepError(RuntimeError):
    """Base class for all companion-core errors."""


class InvalidTransitionError(BeaconKeepError):
    """Raised when a requested state transition is not valid."""


class AcquisitionFailureReason(str, Enum):
    """Why the helper could not hand over a token."""

    HELPER_NOT_FOUND = "helper_not_found"
    UNDECODABLE = "undecodable"
    OTHER = "other"


class AcquisitionError(BeaconKeepError):
    """The helper was unreachable or returned unusable token data."""

    def __init__(
        self,
        message: str = "token acquisition failed",
        *,
        reason: AcquisitionFailureReason = AcquisitionFailureReason.OTHER,
    ) -> None:
        super().__init__(message)
        self.reason = reason


class InstallError(BeaconKeepError):
    """The privileged helper could not be installed."""


class DownloadError(BeaconKeepError):
    """The manual helper download fallback failed."""


class ReportFailureKind(str, Enum):
    """Classification of a failed location-report download."""

    NO_REPORTS_FOUND = "no_reports_found"
    GENERIC = "generic"


class DownloadReportsError(BeaconKeepError):
    """Downloading location reports failed."""

    def __init__(
        self,
        message: str = "downloading location reports failed",
        *,
        kind: ReportFailureKind = ReportFailureKind.GENERIC,
    ) -> None:
        super().__init__(message)
        self.kind = kind


class DeployError(BeaconKeepError):
    """Provisioning an accessory onto a hardware tag failed."""


class KeyGenerationError(BeaconKeepError):
    """Key material for a new accessory could not be created."""
