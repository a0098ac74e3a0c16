"""Bridges to the collaborators outside the companion core."""

from beaconkeep.bridge.gateways import (
    DirectTokenProbe,
    HelperLifecycleGateway,
    KeychainTokenProbe,
    KeyGenerator,
    NullTokenProbe,
    Provisioner,
    RandomKeyGenerator,
    ReportFetcher,
)

__all__ = [
    "DirectTokenProbe",
    "HelperLifecycleGateway",
    "ReportFetcher",
    "Provisioner",
    "KeyGenerator",
    "NullTokenProbe",
    "KeychainTokenProbe",
    "RandomKeyGenerator",
]
