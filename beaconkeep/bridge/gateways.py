"""External collaborator contracts for the companion core.

The core never looks inside these collaborators; it only reacts to what
they return.  Each is a ``Protocol`` so any object with the right methods
plugs in:

- ``DirectTokenProbe``        — zero-cost OS-level token extraction.
- ``HelperLifecycleGateway``  — the privileged helper (install, fallback
  download, token requests).
- ``ReportFetcher``           — the location-report download capability.
- ``Provisioner``             — deploys accessory keys onto hardware tags.
- ``KeyGenerator``            — key material for new accessories.

Asynchronous results are ``concurrent.futures.Future`` objects; the core
marshals their completion onto its control thread.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Sequence
from concurrent.futures import Future
from typing import Protocol, runtime_checkable

from beaconkeep.errors import KeyGenerationError
from beaconkeep.models.accessory import Accessory, LocationReport
from beaconkeep.models.deployment import HardwareProfile
from beaconkeep.models.token import AuthToken

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class DirectTokenProbe(Protocol):
    """Synchronous token extraction that never raises.

    Returns the raw token bytes, or ``None`` when the OS blocks access or
    no token exists.
    """

    def fetch_token(self) -> bytes | None:
        ...


@runtime_checkable
class HelperLifecycleGateway(Protocol):
    """The privileged out-of-process helper."""

    def is_installed(self) -> bool:
        ...

    def install(self) -> None:
        """Install the helper.  Raises ``InstallError``."""
        ...

    def download_only(self) -> None:
        """Manual download fallback.  Raises ``DownloadError``."""
        ...

    def request_token(self) -> Future[bytes]:
        """Ask the running helper for the token.

        The future resolves to raw token bytes or fails with
        ``AcquisitionError``.
        """
        ...


@runtime_checkable
class ReportFetcher(Protocol):
    """Downloads and decodes location reports for the given accessories."""

    def fetch(
        self, token: AuthToken | None, accessories: Sequence[Accessory]
    ) -> Future[dict[str, list[LocationReport]]]:
        """The future fails with ``DownloadReportsError`` on classified failures."""
        ...


@runtime_checkable
class Provisioner(Protocol):
    """Writes an accessory's key onto a hardware tag."""

    def deploy(self, accessory: Accessory, profile: HardwareProfile) -> Future[None]:
        """The future fails with ``DeployError`` carrying a readable description."""
        ...


@runtime_checkable
class KeyGenerator(Protocol):
    def generate(self) -> bytes:
        """Return fresh private key bytes.  Raises ``KeyGenerationError``."""
        ...


# ---------------------------------------------------------------------------
# Default implementations
# ---------------------------------------------------------------------------


class NullTokenProbe:
    """Probe for platforms without direct access.  Always misses."""

    def fetch_token(self) -> bytes | None:
        return None


class KeychainTokenProbe:
    """Reads the token from the macOS keychain with the ``security`` tool.

    Any failure (tool missing, item missing, access denied, timeout) is
    reported as absence.

    Parameters
    ----------
    service:
        Keychain service name of the generic-password item.
    binary:
        Name or path of the ``security`` executable.
    timeout:
        Seconds before the lookup is abandoned.
    """

    def __init__(
        self,
        service: str,
        *,
        binary: str = "security",
        timeout: float = 5.0,
    ) -> None:
        self.service = service
        self.binary = binary
        self.timeout = timeout

    def fetch_token(self) -> bytes | None:
        executable = shutil.which(self.binary)
        if executable is None:
            logger.debug("Keychain probe: %s not found on PATH", self.binary)
            return None
        try:
            result = subprocess.run(
                [executable, "find-generic-password", "-s", self.service, "-w"],
                capture_output=True,
                timeout=self.timeout,
            )
        except (subprocess.SubprocessError, OSError) as exc:
            logger.debug("Keychain probe failed: %s", exc)
            return None
        if result.returncode != 0:
            logger.debug("Keychain probe: item unavailable (exit %d)", result.returncode)
            return None
        token = result.stdout.strip()
        return token or None


class RandomKeyGenerator:
    """Draws private key bytes from the OS CSPRNG.

    Parameters
    ----------
    length:
        Key size in bytes.  28 bytes matches a P-224 private scalar.
    """

    def __init__(self, length: int = 28) -> None:
        self.length = length

    def generate(self) -> bytes:
        try:
            return os.urandom(self.length)
        except NotImplementedError as exc:
            raise KeyGenerationError(f"no randomness source available: {exc}") from exc
