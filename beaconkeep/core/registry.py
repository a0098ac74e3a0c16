"""In-memory accessory registry.

Records live only for the lifetime of the process.
"""

from __future__ import annotations

import logging

from pydantic import SecretBytes

from beaconkeep.bridge.gateways import KeyGenerator, RandomKeyGenerator
from beaconkeep.core.alert_center import AlertCenter
from beaconkeep.errors import KeyGenerationError
from beaconkeep.models.accessory import Accessory
from beaconkeep.models.alerts import AlertKind

logger = logging.getLogger(__name__)


class AccessoryRegistry:
    """Registered accessories, in insertion order.

    Parameters
    ----------
    alerts:
        Receives ``key_creation_error`` and ``deletion_failed`` prompts.
    key_generator:
        Source of private key material for ``create``.
    """

    def __init__(
        self,
        alerts: AlertCenter,
        key_generator: KeyGenerator | None = None,
    ) -> None:
        self._alerts = alerts
        self._key_generator = key_generator or RandomKeyGenerator()
        self._accessories: dict[str, Accessory] = {}

    def __len__(self) -> int:
        return len(self._accessories)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._accessories

    @property
    def is_empty(self) -> bool:
        return not self._accessories

    @property
    def accessories(self) -> list[Accessory]:
        return list(self._accessories.values())

    def get(self, identifier: str) -> Accessory | None:
        return self._accessories.get(identifier)

    def add(self, accessory: Accessory) -> Accessory:
        """Register *accessory*, replacing any record with the same identifier."""
        self._accessories[accessory.identifier] = accessory
        logger.info("Registered accessory %s (%s)", accessory.name, accessory.identifier)
        return accessory

    def create(self, name: str) -> Accessory | None:
        """Create and register a new accessory with fresh key material.

        Returns ``None`` (and raises a ``key_creation_error`` alert) when
        the key cannot be generated.
        """
        try:
            key = self._key_generator.generate()
        except KeyGenerationError as exc:
            logger.error("Could not create accessory %r: %s", name, exc)
            self._alerts.show(AlertKind.KEY_CREATION_ERROR, description=str(exc))
            return None
        return self.add(Accessory(name=name, private_key=SecretBytes(key)))

    def remove(self, identifier: str) -> bool:
        """Unregister an accessory.  Unknown identifiers raise ``deletion_failed``."""
        removed = self._accessories.pop(identifier, None)
        if removed is None:
            logger.warning("Cannot delete unknown accessory %s", identifier)
            self._alerts.show(AlertKind.DELETION_FAILED)
            return False
        logger.info("Removed accessory %s", identifier)
        return True
