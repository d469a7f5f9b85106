"""
Periodic Scheduler.

Drives the reconciliation cycle: resolve, build when needed, publish. A cycle
runs immediately and then once per interval, measured from the end of the
previous cycle, so cycles never overlap. The interval is the only retry
mechanism for a failed cycle.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from nighthawk_adapter.context import AgentContext
from nighthawk_adapter.modules.generation import (
    ComponentBuilder,
    ComponentGenerationError,
    GenerationResolver,
)
from nighthawk_adapter.modules.registry import RegistrationError, RegistryClient

logger = logging.getLogger("nighthawk_adapter.registration.scheduler")

RE_REGISTER_INTERVAL = 24 * 60 * 60


class CycleState(str, Enum):
    """States of a single reconciliation cycle."""

    IDLE = "idle"
    RESOLVING = "resolving"
    SKIP = "skip"
    GENERATING = "generating"
    FAIL = "fail"
    BUILT = "built"
    REGISTERING = "registering"


class CycleOutcome(str, Enum):
    """How a reconciliation cycle ended."""

    SKIPPED = "skipped"
    BUILD_FAILED = "build_failed"
    REGISTERED = "registered"
    REGISTER_FAILED = "register_failed"
    ERROR = "error"


class PeriodicScheduler:
    """Run reconciliation cycles on a fixed interval until stopped."""

    def __init__(
        self,
        context: AgentContext,
        resolver: GenerationResolver,
        builder: ComponentBuilder,
        registry: RegistryClient,
        interval: float = RE_REGISTER_INTERVAL,
    ):
        """
        Initialize scheduler.

        Args:
            context: Adapter context (identity, build info, config provider)
            resolver: Decides whether and how to regenerate
            builder: Regenerates components
            registry: Publishes the capability set
            interval: Seconds between the end of one cycle and the next
        """
        self.context = context
        self.resolver = resolver
        self.builder = builder
        self.registry = registry
        self.interval = interval

        self.state = CycleState.IDLE
        self.last_outcome: Optional[CycleOutcome] = None
        self.last_cycle_at: Optional[datetime] = None
        self.cycles_run = 0
        self._stop = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        """Stop after the current cycle; wakes a pending wait immediately."""
        self._stop.set()

    def _transition(self, state: CycleState) -> None:
        logger.debug(f"Reconciliation cycle {self.state.value} -> {state.value}")
        self.state = state

    def _finish(self, outcome: CycleOutcome) -> CycleOutcome:
        self._transition(CycleState.IDLE)
        self.last_outcome = outcome
        self.last_cycle_at = datetime.now(timezone.utc)
        self.cycles_run += 1
        return outcome

    async def run_cycle(self) -> CycleOutcome:
        """Run one reconciliation cycle to completion."""
        logger.info("Registering latest components with Meshery Server")

        registration = self.context.current_registration()
        version = self.context.build_info.latest_version

        self._transition(CycleState.RESOLVING)
        config = self.resolver.resolve(
            version,
            force=registration.force_dynamic_registration,
            url_override=registration.generation_url,
            method_override=registration.generation_method,
        )
        if config is None:
            self._transition(CycleState.SKIP)
            return self._finish(CycleOutcome.SKIPPED)

        self._transition(CycleState.GENERATING)
        logger.info(f"Registering latest workload components for version {version}")
        try:
            # The built set is installed into the store; publishing reads the
            # store so bundled versions are advertised alongside it
            await self.builder.build(config)
        except ComponentGenerationError as e:
            logger.info(f"Failed to generate components for version {version}")
            logger.error(str(e))
            self._transition(CycleState.FAIL)
            return self._finish(CycleOutcome.BUILD_FAILED)

        self._transition(CycleState.BUILT)
        self._transition(CycleState.REGISTERING)
        logger.info(f"Registering workloads with Meshery Server for version {version}")
        try:
            await self.registry.register(
                self.context.instance_id,
                registration.server_address,
                registration.service_address,
                self.context.port,
            )
        except RegistrationError as e:
            logger.error(f"Failed to register components for version {version}: {e}")
            return self._finish(CycleOutcome.REGISTER_FAILED)

        logger.info(f"Latest workload components successfully registered for version {version}")
        return self._finish(CycleOutcome.REGISTERED)

    async def _wait(self, seconds: float) -> bool:
        """Wait for the next tick; returns True if stopped meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False

    async def run(self, max_cycles: Optional[int] = None) -> None:
        """
        Main scheduler loop.

        Args:
            max_cycles: Stop after this many cycles (None runs until stopped)
        """
        logger.info(f"Periodic registration started (interval: {self.interval}s)")
        cycles = 0

        while not self._stop.is_set():
            try:
                outcome = await self.run_cycle()
                logger.debug(f"Reconciliation cycle finished: {outcome.value}")
            except Exception as e:
                logger.exception(f"Reconciliation cycle failed: {e}")
                self._finish(CycleOutcome.ERROR)

            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break

            if await self._wait(self.interval):
                break

        logger.info("Periodic registration stopped")
