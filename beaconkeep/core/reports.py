"""Location-report download coordinator.

Runs a report refresh with whatever token is currently stored and maps the
outcome onto the alert center:

- success                       : reports kept, no UI signal
- ``no_reports_found`` failure  : transient notification
- any other failure             : modal ``download_failed`` alert

The first time a non-empty token lands in the token store while at least
one accessory is registered, a refresh runs automatically, exactly once.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future

from beaconkeep.bridge.gateways import ReportFetcher
from beaconkeep.core.scheduler import deliver
from beaconkeep.core.state import CompanionState
from beaconkeep.errors import DownloadReportsError, ReportFailureKind
from beaconkeep.models.accessory import LocationReport
from beaconkeep.models.alerts import AlertKind, NotificationKind
from beaconkeep.models.token import AuthToken

logger = logging.getLogger(__name__)


class ReportDownloadCoordinator:
    """Triggers report refreshes and surfaces their outcome.

    Parameters
    ----------
    state:
        Shared companion state.
    fetcher:
        The report download capability.
    """

    def __init__(self, state: CompanionState, fetcher: ReportFetcher) -> None:
        self._state = state
        self._fetcher = fetcher
        self._loading = False
        self._auto_refreshed = False
        self._auto_refresh_pending = False
        self._last_reports: dict[str, list[LocationReport]] = {}
        state.tokens.subscribe(self._on_token_stored)

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def auto_refreshed(self) -> bool:
        return self._auto_refreshed

    @property
    def last_reports(self) -> dict[str, list[LocationReport]]:
        return dict(self._last_reports)

    @property
    def can_refresh(self) -> bool:
        return not self._state.accessories.is_empty and not self._loading

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def refresh(self) -> bool:
        """Start a report download.

        Returns ``False`` without fetching when no accessory is registered
        or a download is already running.
        """
        accessories = self._state.accessories.accessories
        if not accessories:
            logger.debug("Refresh skipped: no accessories registered")
            return False
        if self._loading:
            logger.debug("Refresh skipped: download already running")
            return False

        self._loading = True
        logger.info("Downloading location reports for %d accessories", len(accessories))
        try:
            future = self._fetcher.fetch(self._state.tokens.token, accessories)
        except Exception as exc:  # noqa: BLE001
            self._loading = False
            self._surface_failure(exc)
            return True
        deliver(self._state.scheduler, future, self._on_result)
        return True

    def _on_result(self, future: Future[dict[str, list[LocationReport]]]) -> None:
        self._loading = False
        try:
            reports = future.result()
        except Exception as exc:  # noqa: BLE001
            self._surface_failure(exc)
        else:
            self._last_reports = dict(reports)
            total = sum(len(batch) for batch in self._last_reports.values())
            logger.info(
                "Downloaded %d reports for %d accessories", total, len(self._last_reports)
            )

        if self._auto_refresh_pending:
            self._auto_refresh_pending = False
            self._start_auto_refresh()

    def _surface_failure(self, exc: Exception) -> None:
        if not isinstance(exc, DownloadReportsError):
            exc = DownloadReportsError(str(exc) or type(exc).__name__)
        if exc.kind == ReportFailureKind.NO_REPORTS_FOUND:
            logger.info("No location reports found")
            self._state.alerts.notify(NotificationKind.NO_REPORTS_FOUND, str(exc))
            return
        logger.error("Downloading location reports failed: %s", exc)
        self._state.alerts.show(AlertKind.DOWNLOAD_FAILED, description=str(exc))

    # ------------------------------------------------------------------
    # Token coupling
    # ------------------------------------------------------------------

    def _on_token_stored(self, token: AuthToken) -> None:
        if token.is_empty:
            return
        self._start_auto_refresh()

    def _start_auto_refresh(self) -> None:
        if self._auto_refreshed or self._state.accessories.is_empty:
            return
        if not self._state.tokens.has_token:
            return
        if self._loading:
            # Runs once the download already in flight settles.
            logger.debug("Auto refresh deferred: download already running")
            self._auto_refresh_pending = True
            return
        self._auto_refreshed = self.refresh()
