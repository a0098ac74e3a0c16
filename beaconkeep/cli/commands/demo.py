"""``beaconkeep demo`` — run the companion core against simulated collaborators.

The simulated helper is installed but stays inactive for the first few
token requests, so the demo shows the activation prompt, the silent retry
loop, the automatic report download on first token and a deployment.
"""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import TypeVar

import typer
from rich.console import Console
from rich.panel import Panel

from beaconkeep.bridge.gateways import NullTokenProbe
from beaconkeep.config import CompanionConfig
from beaconkeep.core.companion import Companion
from beaconkeep.core.scheduler import AsyncioScheduler
from beaconkeep.errors import AcquisitionError, AcquisitionFailureReason
from beaconkeep.models.accessory import Accessory, LocationReport
from beaconkeep.models.deployment import DeploymentPhase, HardwareProfile
from beaconkeep.models.token import AuthToken
from beaconkeep.presentation.renderer import AlertRenderer

console = Console()

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Simulated collaborators
# ---------------------------------------------------------------------------


class SimulatedHelper:
    """Helper that only hands out a token from the N-th request on."""

    def __init__(self, pool: Executor, *, activate_after: int, latency: float) -> None:
        self._pool = pool
        self._activate_after = activate_after
        self._latency = latency
        self.requests = 0

    def is_installed(self) -> bool:
        return True

    def install(self) -> None:
        return None

    def download_only(self) -> None:
        return None

    def request_token(self) -> Future[bytes]:
        self.requests += 1
        attempt = self.requests

        def _answer() -> bytes:
            time.sleep(self._latency)
            if attempt < self._activate_after:
                raise AcquisitionError(
                    "helper is not active yet",
                    reason=AcquisitionFailureReason.HELPER_NOT_FOUND,
                )
            return b"demo-search-party-token"

        return self._pool.submit(_answer)


class SimulatedFetcher:
    """Produces a handful of random reports around a fixed point."""

    def __init__(self, pool: Executor, *, latency: float) -> None:
        self._pool = pool
        self._latency = latency

    def fetch(
        self, token: AuthToken | None, accessories: Sequence[Accessory]
    ) -> Future[dict[str, list[LocationReport]]]:
        def _download() -> dict[str, list[LocationReport]]:
            time.sleep(self._latency)
            now = datetime.now(timezone.utc)
            return {
                accessory.identifier: [
                    LocationReport(
                        accessory_id=accessory.identifier,
                        timestamp=now - timedelta(minutes=15 * i),
                        latitude=49.8728 + random.uniform(-0.01, 0.01),
                        longitude=8.6512 + random.uniform(-0.01, 0.01),
                        confidence=random.randint(1, 3),
                    )
                    for i in range(3)
                ]
                for accessory in accessories
            }

        return self._pool.submit(_download)


class SimulatedProvisioner:
    def __init__(self, pool: Executor, *, latency: float) -> None:
        self._pool = pool
        self._latency = latency

    def deploy(self, accessory: Accessory, profile: HardwareProfile) -> Future[None]:
        return self._pool.submit(time.sleep, self._latency)


# ---------------------------------------------------------------------------
# Demo run
# ---------------------------------------------------------------------------


async def _wait_for(predicate: Callable[[], T], timeout: float) -> T:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        result = predicate()
        if result:
            return result
        if loop.time() > deadline:
            raise TimeoutError("demo step timed out")
        await asyncio.sleep(0.01)


async def _run_demo(
    settings: CompanionConfig,
    *,
    activate_after: int,
    latency: float,
    timeout: float,
) -> Companion:
    scheduler = AsyncioScheduler()
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="beaconkeep-demo") as pool:
        helper = SimulatedHelper(pool, activate_after=activate_after, latency=latency)
        companion = Companion(
            scheduler,
            helper=helper,
            fetcher=SimulatedFetcher(pool, latency=latency),
            provisioner=SimulatedProvisioner(pool, latency=latency),
            probe=NullTokenProbe(),
            config=settings,
        )
        companion.alerts.subscribe(AlertRenderer(console=console))

        accessory = companion.accessories.create("Backpack")
        if accessory is None:
            raise typer.Exit(code=1)

        console.print("[cyan]>>> Acquiring token[/cyan]")
        companion.start()
        await _wait_for(lambda: companion.acquisition.is_complete, timeout)
        console.print(
            f"[bold green]Token acquired[/bold green] via {companion.tokens.provenance.value} "
            f"after {helper.requests} helper requests "
            f"({companion.acquisition.retries_scheduled} retries)"
        )
        companion.alerts.dismiss()

        console.print("[cyan]>>> Waiting for first report download[/cyan]")
        reports = await _wait_for(lambda: companion.reports.last_reports, timeout)
        console.print(f"[bold green]Reports:[/bold green] {sum(map(len, reports.values()))}")

        console.print("[cyan]>>> Deploying accessory[/cyan]")
        companion.deployment.begin(accessory)
        companion.deployment.select_target(HardwareProfile.TAG_A)
        await _wait_for(
            lambda: companion.deployment.phase == DeploymentPhase.RESOLVED, timeout
        )
        companion.shutdown()
    return companion


def demo_cmd(
    activate_after: int = typer.Option(
        3,
        "--activate-after",
        "-n",
        min=1,
        help="Helper request number on which the simulated helper becomes active.",
    ),
    retry_interval: float = typer.Option(
        None,
        "--retry-interval",
        help="Seconds between silent retries (defaults to the configured value).",
    ),
    latency: float = typer.Option(
        0.05, "--latency", help="Simulated collaborator latency in seconds."
    ),
    timeout: float = typer.Option(
        60.0, "--timeout", help="Give up on any single step after this many seconds."
    ),
) -> None:
    """Run the acquisition, download and deployment flows with simulated collaborators."""
    settings = CompanionConfig()
    if retry_interval is not None:
        settings = settings.model_copy(update={"retry_interval_seconds": retry_interval})

    console.print(
        Panel(
            "[bold]BeaconKeep Demo[/bold]\n\n"
            f"The simulated helper becomes active on request #{activate_after}.\n"
            f"Silent retries every {settings.retry_interval_seconds:g}s.",
            border_style="cyan",
            padding=(1, 2),
        )
    )
    try:
        companion = asyncio.run(
            _run_demo(settings, activate_after=activate_after, latency=latency, timeout=timeout)
        )
    except TimeoutError as exc:
        console.print(f"[bold red]Demo failed:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc

    outcome = companion.deployment.outcome
    console.print(
        Panel(
            "\n".join([
                "[bold green]Demo Complete![/bold green]",
                "",
                f"[bold]Acquisition:[/bold] {companion.acquisition.state.value}",
                f"[bold]Retries:[/bold]     {companion.acquisition.retries_scheduled}",
                f"[bold]Deployment:[/bold]  {outcome.value if outcome else 'none'}",
            ]),
            title="[bold]Demo Summary[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
