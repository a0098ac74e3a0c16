"""Tests for the TokenStore."""

from __future__ import annotations

from pydantic import SecretBytes

from beaconkeep.core.token_store import TokenStore
from beaconkeep.models.token import AuthToken, TokenProvenance


def _token(raw: bytes, provenance: TokenProvenance = TokenProvenance.DIRECT) -> AuthToken:
    return AuthToken(raw=SecretBytes(raw), provenance=provenance)


class TestTokenStore:
    """A single overwritable token slot with listeners."""

    def test_empty_by_default(self):
        """A new store holds no token."""
        store = TokenStore()
        assert store.token is None
        assert store.provenance is None
        assert store.has_token is False

    def test_store_overwrites(self):
        """Each store() replaces the previous token."""
        store = TokenStore()
        store.store(_token(b"first"))
        store.store(_token(b"second", TokenProvenance.HELPER))
        assert store.token.decode() == "second"
        assert store.provenance == TokenProvenance.HELPER

    def test_listeners_notified(self):
        """Listeners receive every stored token."""
        store = TokenStore()
        seen = []
        store.subscribe(seen.append)
        token = _token(b"abc")
        store.store(token)
        assert seen == [token]

    def test_failing_listener_isolated(self):
        """A raising listener does not stop the others."""
        store = TokenStore()
        seen = []

        def _broken(token):
            raise ValueError("bad listener")

        store.subscribe(_broken)
        store.subscribe(seen.append)
        store.store(_token(b"abc"))
        assert len(seen) == 1

    def test_clear(self):
        """clear() forgets the token."""
        store = TokenStore()
        store.store(_token(b"abc"))
        store.clear()
        assert store.token is None

    def test_empty_token_is_not_a_token(self):
        """An empty token does not count as has_token."""
        store = TokenStore()
        store.store(_token(b""))
        assert store.has_token is False
