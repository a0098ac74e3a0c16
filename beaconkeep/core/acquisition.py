"""Token acquisition orchestrator.

Drives the credential acquisition state machine:

1. Try the direct probe (first call, and every non-silent call).
2. Otherwise check whether the privileged helper is installed.
   - Not installed: prompt (unless silent) and wait for ``install_helper``.
   - Installed: request the token from the helper, asynchronously.
3. Helper success stores the token and ends the cycle.
4. Helper failure prompts (unless silent) and re-arms a silent retry after
   the retry interval.  The loop only stops on success, because helper
   activation happens outside this process at an unknown time.

Every transition is validated against ``ACQUISITION_TRANSITIONS`` and kept
in ``history``.
"""

from __future__ import annotations

import functools
import logging
import threading
from concurrent.futures import Future

from beaconkeep.bridge.gateways import DirectTokenProbe, HelperLifecycleGateway
from beaconkeep.core.scheduler import ScheduledTask, deliver
from beaconkeep.core.state import CompanionState
from beaconkeep.errors import (
    AcquisitionError,
    AcquisitionFailureReason,
    DownloadError,
    InstallError,
    InvalidTransitionError,
)
from beaconkeep.models.acquisition import (
    ACQUISITION_TRANSITIONS,
    TERMINAL_ACQUISITION_STATES,
    AcquisitionState,
    AcquisitionTransition,
)
from beaconkeep.models.alerts import AlertKind
from beaconkeep.models.token import AuthToken, TokenProvenance

logger = logging.getLogger(__name__)


class TokenAcquisitionOrchestrator:
    """Acquires the authentication token, directly or through the helper.

    Parameters
    ----------
    state:
        Shared companion state (token store, alert center, scheduler).
    probe:
        Direct OS-level token probe.
    helper:
        Gateway to the privileged helper.
    retry_interval:
        Seconds between silent helper retries.
    token_encoding:
        Text encoding a valid token must decode with.
    """

    def __init__(
        self,
        state: CompanionState,
        probe: DirectTokenProbe,
        helper: HelperLifecycleGateway,
        *,
        retry_interval: float = 5.0,
        token_encoding: str = "ascii",
    ) -> None:
        self._state = state
        self._scheduler = state.scheduler
        self._probe = probe
        self._helper = helper
        self._retry_interval = retry_interval
        self._token_encoding = token_encoding

        self._lock = threading.RLock()
        self._current = AcquisitionState.UNKNOWN
        self._history: list[AcquisitionTransition] = []
        self._direct_probed = False
        self._request_in_flight = False
        self._retry: ScheduledTask | None = None
        self._retries_scheduled = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> AcquisitionState:
        return self._current

    @property
    def history(self) -> list[AcquisitionTransition]:
        return list(self._history)

    @property
    def retries_scheduled(self) -> int:
        """Total number of retries armed since construction."""
        return self._retries_scheduled

    @property
    def retry_pending(self) -> bool:
        return self._retry is not None

    @property
    def request_in_flight(self) -> bool:
        return self._request_in_flight

    @property
    def helper_active(self) -> bool:
        return self._current == AcquisitionState.HELPER_ACTIVE

    @property
    def is_complete(self) -> bool:
        return self._current in TERMINAL_ACQUISITION_STATES

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------

    def acquire(self, silent: bool = False) -> AcquisitionState:
        """Run one acquisition attempt.

        A no-op once a token has been acquired, and while a helper request
        is still outstanding.  Returns the state after the synchronous part
        of the attempt.
        """
        with self._lock:
            if self.is_complete:
                logger.debug("acquire(silent=%s) ignored: already %s", silent, self._current.value)
                return self._current
            if self._request_in_flight:
                logger.debug("acquire(silent=%s) ignored: helper request in flight", silent)
                return self._current

            self._cancel_retry()

            if not silent or not self._direct_probed:
                if self._try_direct(silent):
                    return self._current

            self._check_helper(silent)
            return self._current

    def _try_direct(self, silent: bool) -> bool:
        self._transition(AcquisitionState.CHECKING_DIRECT, silent)
        self._direct_probed = True
        try:
            raw = self._probe.fetch_token()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Direct token probe failed: %s", exc)
            raw = None
        token = self._decode(raw, TokenProvenance.DIRECT)
        if token is None:
            logger.info("Direct token access unavailable, falling back to helper")
            return False
        self._transition(AcquisitionState.DIRECT_SUCCEEDED, silent)
        self._state.tokens.store(token)
        return True

    def _check_helper(self, silent: bool) -> None:
        self._transition(AcquisitionState.CHECKING_HELPER_INSTALLED, silent)
        if not self._helper_installed():
            self._transition(AcquisitionState.HELPER_NOT_INSTALLED, silent)
            logger.info("Helper not installed")
            if not silent:
                self._state.alerts.show(AlertKind.ACTIVATE_HELPER_PROMPT)
            return

        self._transition(AcquisitionState.HELPER_INSTALLED_INACTIVE, silent)
        self._request_in_flight = True
        try:
            future = self._helper.request_token()
        except Exception as exc:  # noqa: BLE001
            future = Future()
            future.set_exception(exc)
        deliver(self._scheduler, future, functools.partial(self._on_token_result, silent))

    def _on_token_result(self, silent: bool, future: Future[bytes]) -> None:
        with self._lock:
            self._request_in_flight = False
            if self.is_complete:
                return

            try:
                raw = future.result()
            except AcquisitionError as exc:
                error = exc
            except Exception as exc:  # noqa: BLE001
                error = AcquisitionError(str(exc) or type(exc).__name__)
            else:
                token = self._decode(raw, TokenProvenance.HELPER)
                if token is not None:
                    self._transition(AcquisitionState.HELPER_ACTIVE, silent)
                    self._cancel_retry()
                    self._state.tokens.store(token)
                    logger.info("Helper active, token acquired")
                    return
                error = AcquisitionError(
                    "helper returned an empty or undecodable token",
                    reason=AcquisitionFailureReason.UNDECODABLE,
                )

            logger.warning("Helper token request failed (%s): %s", error.reason.value, error)
            # Every failure reason maps to the same activation prompt.
            if not silent:
                self._state.alerts.show(AlertKind.ACTIVATE_HELPER_PROMPT)
            self._schedule_retry()

    # ------------------------------------------------------------------
    # Retry timer
    # ------------------------------------------------------------------

    def _schedule_retry(self) -> None:
        self._cancel_retry()
        self._retry = self._scheduler.call_later(self._retry_interval, self._retry_fired)
        self._retries_scheduled += 1
        logger.debug(
            "Retry #%d scheduled in %.1fs", self._retries_scheduled, self._retry_interval
        )

    def _retry_fired(self) -> None:
        with self._lock:
            self._retry = None
        self.acquire(silent=True)

    def _cancel_retry(self) -> None:
        if self._retry is not None:
            self._retry.cancel()
            self._retry = None

    def shutdown(self) -> None:
        """Disarm any pending retry."""
        with self._lock:
            self._cancel_retry()

    # ------------------------------------------------------------------
    # Helper provisioning (user-triggered)
    # ------------------------------------------------------------------

    def install_helper(self) -> bool:
        """Install the helper, then resume acquisition silently.

        Returns ``True`` when an installation was performed.
        """
        installed = False
        if not self._helper_installed():
            try:
                self._helper.install()
            except InstallError as exc:
                logger.error("Could not install helper: %s", exc)
                self._state.alerts.show(AlertKind.HELPER_INSTALL_FAILED, description=str(exc))
                return False
            logger.info("Helper installed")
            installed = True
        self.acquire(silent=True)
        return installed

    def download_helper(self) -> bool:
        """Manual fallback: download the helper for the user to install."""
        try:
            self._helper.download_only()
        except DownloadError as exc:
            logger.error("Could not download helper: %s", exc)
            self._state.alerts.show(AlertKind.HELPER_INSTALL_FAILED, description=str(exc))
            return False
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decode(self, raw: bytes | None, provenance: TokenProvenance) -> AuthToken | None:
        if not raw:
            return None
        try:
            text = raw.decode(self._token_encoding)
        except (UnicodeDecodeError, LookupError):
            logger.debug("%s token is not valid %s", provenance.value, self._token_encoding)
            return None
        if not text:
            return None
        return AuthToken(raw=raw, provenance=provenance)

    def _helper_installed(self) -> bool:
        try:
            return bool(self._helper.is_installed())
        except Exception as exc:  # noqa: BLE001
            logger.warning("Helper installation check failed: %s", exc)
            return False

    def _transition(self, target: AcquisitionState, silent: bool) -> None:
        allowed = ACQUISITION_TRANSITIONS.get(self._current, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot move acquisition from {self._current.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        self._history.append(
            AcquisitionTransition(from_state=self._current, to_state=target, silent=silent)
        )
        logger.debug("Acquisition %s -> %s", self._current.value, target.value)
        self._current = target
