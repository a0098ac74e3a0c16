"""Companion core: acquisition, alerts, report downloads and deployment."""

from beaconkeep.core.acquisition import TokenAcquisitionOrchestrator
from beaconkeep.core.alert_center import AlertCenter
from beaconkeep.core.companion import Companion
from beaconkeep.core.deployment import DeploymentRequestFlow
from beaconkeep.core.registry import AccessoryRegistry
from beaconkeep.core.reports import ReportDownloadCoordinator
from beaconkeep.core.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from beaconkeep.core.state import CompanionState
from beaconkeep.core.token_store import TokenStore

__all__ = [
    "Companion",
    "CompanionState",
    "TokenAcquisitionOrchestrator",
    "AlertCenter",
    "ReportDownloadCoordinator",
    "DeploymentRequestFlow",
    "AccessoryRegistry",
    "TokenStore",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
]
