"""BeaconKeep: companion core for a device-tracking network.

Acquires the authentication token needed to query the tracking network
(directly, or through a privileged helper with a silent retry loop),
downloads location reports once a token is available, provisions accessory
keys onto hardware tags, and serializes the resulting prompts through a
single-slot alert center.
"""

__version__ = "0.1.0"
__description__ = (
    "Token acquisition and report download orchestration for tracked accessories"
)

from beaconkeep.core.companion import Companion
from beaconkeep.cli.app import app as cli

__all__ = ["Companion", "cli", "__version__"]
