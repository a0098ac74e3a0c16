"""Tests for the ReportDownloadCoordinator — outcome mapping and auto refresh."""

from __future__ import annotations

from pydantic import SecretBytes

from beaconkeep.core.reports import ReportDownloadCoordinator
from beaconkeep.errors import DownloadReportsError, ReportFailureKind
from beaconkeep.models.alerts import AlertKind, NotificationKind
from beaconkeep.models.token import AuthToken, TokenProvenance


def _token(raw: bytes = b"token") -> AuthToken:
    return AuthToken(raw=SecretBytes(raw), provenance=TokenProvenance.HELPER)


class TestRefresh:
    """Manual refresh guards and outcome mapping."""

    def test_refresh_without_accessories_is_skipped(self, state, make_fetcher):
        """With no accessory the fetcher is never called."""
        fetcher = make_fetcher()
        coordinator = ReportDownloadCoordinator(state, fetcher)

        assert coordinator.can_refresh is False
        assert coordinator.refresh() is False
        assert fetcher.calls == []

    def test_success_keeps_reports_without_signal(
        self, state, scheduler, recorder, accessory, make_fetcher, sample_reports
    ):
        """Successful downloads are kept silently."""
        state.accessories.add(accessory)
        coordinator = ReportDownloadCoordinator(state, make_fetcher(sample_reports))

        assert coordinator.refresh() is True
        assert coordinator.is_loading is True
        scheduler.run_pending()

        assert coordinator.is_loading is False
        assert coordinator.last_reports == sample_reports
        assert recorder.alerts == []
        assert recorder.notifications == []

    def test_fetcher_gets_current_token(self, state, scheduler, accessory, make_fetcher):
        """The fetcher receives the stored token, which may be None."""
        fetcher = make_fetcher()
        coordinator = ReportDownloadCoordinator(state, fetcher)
        coordinator.refresh()
        state.accessories.add(accessory)

        coordinator.refresh()
        token, accessories = fetcher.calls[0]
        assert token is None
        assert accessories == [accessory]

    def test_no_reports_found_is_transient(self, state, scheduler, recorder, accessory, make_fetcher):
        """An empty result is a notification that expires on its own."""
        state.accessories.add(accessory)
        error = DownloadReportsError("nothing yet", kind=ReportFailureKind.NO_REPORTS_FOUND)
        coordinator = ReportDownloadCoordinator(state, make_fetcher(error))

        coordinator.refresh()
        scheduler.run_pending()

        assert state.alerts.alert is None
        assert state.alerts.notification.kind == NotificationKind.NO_REPORTS_FOUND
        scheduler.advance(2.0)
        assert state.alerts.notification is None

    def test_generic_failure_is_modal(self, state, scheduler, accessory, make_fetcher):
        """Other download errors raise download_failed with the description."""
        state.accessories.add(accessory)
        coordinator = ReportDownloadCoordinator(
            state, make_fetcher(DownloadReportsError("HTTP 500"))
        )

        coordinator.refresh()
        scheduler.run_pending()

        assert state.alerts.alert.kind == AlertKind.DOWNLOAD_FAILED
        assert state.alerts.alert.description == "HTTP 500"
        assert state.alerts.notification is None

    def test_unclassified_exception_is_modal(self, state, scheduler, accessory, make_fetcher):
        """Exceptions outside the taxonomy are reported as download_failed."""
        state.accessories.add(accessory)
        coordinator = ReportDownloadCoordinator(state, make_fetcher(ConnectionError("reset")))

        coordinator.refresh()
        scheduler.run_pending()

        assert state.alerts.alert.kind == AlertKind.DOWNLOAD_FAILED
        assert state.alerts.alert.description == "reset"

    def test_synchronous_fetch_error_releases_loading(self, state, accessory):
        """A fetch() that raises is surfaced and leaves refresh usable."""

        class _Offline:
            calls = 0

            def fetch(self, token, accessories):
                self.calls += 1
                raise OSError("network down")

        state.accessories.add(accessory)
        fetcher = _Offline()
        coordinator = ReportDownloadCoordinator(state, fetcher)

        assert coordinator.refresh() is True
        assert coordinator.is_loading is False
        assert state.alerts.alert.kind == AlertKind.DOWNLOAD_FAILED
        assert state.alerts.alert.description == "network down"

        assert coordinator.refresh() is True
        assert fetcher.calls == 2

    def test_refresh_while_loading_is_skipped(self, state, scheduler, accessory, make_fetcher):
        """Only one download runs at a time."""
        state.accessories.add(accessory)
        fetcher = make_fetcher(pending=True)
        coordinator = ReportDownloadCoordinator(state, fetcher)

        assert coordinator.refresh() is True
        assert coordinator.refresh() is False
        fetcher.futures[0].set_result({})
        scheduler.run_pending()
        assert coordinator.refresh() is True
        assert len(fetcher.calls) == 2

    def test_failures_are_not_retried(self, state, scheduler, accessory, make_fetcher):
        """A failed download is not repeated automatically."""
        state.accessories.add(accessory)
        fetcher = make_fetcher(DownloadReportsError("down"))
        coordinator = ReportDownloadCoordinator(state, fetcher)
        coordinator.refresh()
        scheduler.advance(60.0)
        assert len(fetcher.calls) == 1


class TestAutoRefresh:
    """The one-shot refresh triggered by the first stored token."""

    def test_first_token_triggers_one_refresh(self, state, scheduler, accessory, make_fetcher):
        """Only the first token starts a download."""
        state.accessories.add(accessory)
        fetcher = make_fetcher()
        coordinator = ReportDownloadCoordinator(state, fetcher)

        state.tokens.store(_token())
        scheduler.run_pending()
        state.tokens.store(_token(b"newer"))
        scheduler.run_pending()

        assert len(fetcher.calls) == 1
        assert coordinator.auto_refreshed is True
        assert fetcher.calls[0][0].decode() == "token"

    def test_token_without_accessories_does_not_refresh(self, state, accessory, make_fetcher):
        """A token stored before any accessory does not use up the trigger."""
        fetcher = make_fetcher()
        coordinator = ReportDownloadCoordinator(state, fetcher)

        state.tokens.store(_token())
        assert fetcher.calls == []
        assert coordinator.auto_refreshed is False

        state.accessories.add(accessory)
        state.tokens.store(_token())
        assert len(fetcher.calls) == 1

    def test_empty_token_does_not_refresh(self, state, accessory, make_fetcher):
        """An empty token is not a token."""
        state.accessories.add(accessory)
        fetcher = make_fetcher()
        ReportDownloadCoordinator(state, fetcher)

        state.tokens.store(_token(b""))
        assert fetcher.calls == []

    def test_token_during_manual_refresh_is_fetched_afterwards(
        self, state, scheduler, accessory, make_fetcher
    ):
        """A token arriving mid-download triggers its refresh once that download settles."""
        state.accessories.add(accessory)
        fetcher = make_fetcher(pending=True)
        coordinator = ReportDownloadCoordinator(state, fetcher)

        assert coordinator.refresh() is True
        state.tokens.store(_token())
        assert coordinator.auto_refreshed is False
        assert len(fetcher.calls) == 1

        fetcher.futures[0].set_result({})
        scheduler.run_pending()

        assert coordinator.auto_refreshed is True
        assert [call[0] is None for call in fetcher.calls] == [True, False]
        assert fetcher.calls[1][0].decode() == "token"

        fetcher.futures[1].set_result({})
        scheduler.run_pending()
        state.tokens.store(_token(b"newer"))
        assert len(fetcher.calls) == 2
