"""Token store — the single slot holding the current authentication token."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from beaconkeep.models.token import AuthToken, TokenProvenance

logger = logging.getLogger(__name__)

TokenListener = Callable[[AuthToken], None]


class TokenStore:
    """Holds the most recently acquired ``AuthToken``.

    Each ``store`` overwrites the previous token.  Listeners are told about
    every stored token, in registration order; a failing listener is logged
    and does not stop the others.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._token: AuthToken | None = None
        self._listeners: list[TokenListener] = []

    @property
    def token(self) -> AuthToken | None:
        with self._lock:
            return self._token

    @property
    def provenance(self) -> TokenProvenance | None:
        token = self.token
        return token.provenance if token is not None else None

    @property
    def has_token(self) -> bool:
        token = self.token
        return token is not None and not token.is_empty

    def subscribe(self, listener: TokenListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def store(self, token: AuthToken) -> None:
        with self._lock:
            self._token = token
        logger.info("Stored %s token", token.provenance.value)
        for listener in list(self._listeners):
            try:
                listener(token)
            except Exception:  # noqa: BLE001
                logger.exception("Token listener %r failed", listener)

    def clear(self) -> None:
        """Forget the token (process teardown)."""
        with self._lock:
            self._token = None
