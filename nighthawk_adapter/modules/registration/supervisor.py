"""
Registration Supervisor.

Owns the bootstrap and periodic registration tasks so their failures are
observed and they can be stopped cleanly when the service shuts down.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from nighthawk_adapter.context import AgentContext
from nighthawk_adapter.modules.generation import (
    CommandRenderer,
    ComponentBuilder,
    GenerationResolver,
)
from nighthawk_adapter.modules.registry import RegistryClient

from .bootstrap import BootstrapRegistrar
from .scheduler import RE_REGISTER_INTERVAL, PeriodicScheduler

logger = logging.getLogger("nighthawk_adapter.registration.supervisor")

BOOTSTRAP_TASK = "bootstrap-registration"
PERIODIC_TASK = "periodic-registration"


class RegistrationSupervisor:
    """Start, watch and stop the registration background tasks."""

    def __init__(self, bootstrap: BootstrapRegistrar, scheduler: PeriodicScheduler):
        self.bootstrap = bootstrap
        self.scheduler = scheduler
        self._tasks: Dict[str, asyncio.Task] = {}
        self._failures: Dict[str, BaseException] = {}

    @classmethod
    def from_context(
        cls, context: AgentContext, interval: float = RE_REGISTER_INTERVAL
    ) -> "RegistrationSupervisor":
        """Wire the default collaborators for a context."""
        registration = context.registration
        registry = RegistryClient(context.store, timeout=registration.registry_timeout)
        resolver = GenerationResolver(
            context.availability, context.build_info, context.service.components_path
        )
        builder = ComponentBuilder(CommandRenderer(registration.generation_command))
        scheduler = PeriodicScheduler(context, resolver, builder, registry, interval=interval)
        return cls(BootstrapRegistrar(context, registry), scheduler)

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks.values())

    @property
    def failures(self) -> Dict[str, BaseException]:
        return dict(self._failures)

    def start(self) -> None:
        """Launch both tasks on the running event loop."""
        if self.running:
            return

        self._failures.clear()
        self._tasks = {
            BOOTSTRAP_TASK: asyncio.create_task(self.bootstrap.run(), name=BOOTSTRAP_TASK),
            PERIODIC_TASK: asyncio.create_task(self.scheduler.run(), name=PERIODIC_TASK),
        }
        for task in self._tasks.values():
            task.add_done_callback(self._on_task_done)
        logger.info("Registration tasks started")

    def _on_task_done(self, task: asyncio.Task) -> None:
        name = task.get_name()
        if task.cancelled():
            logger.debug(f"Task {name} cancelled")
            return

        exc = task.exception()
        if exc is not None:
            self._failures[name] = exc
            logger.error(f"Task {name} failed: {exc}", exc_info=exc)
        else:
            logger.debug(f"Task {name} finished")

    async def stop(self, timeout: float = 5.0) -> None:
        """
        Stop accepting new cycles and wait for the tasks to finish.

        Tasks still running after ``timeout`` seconds are cancelled.
        """
        self.scheduler.stop()
        pending = [task for task in self._tasks.values() if not task.done()]
        if not pending:
            return

        done, still_pending = await asyncio.wait(pending, timeout=timeout)
        for task in still_pending:
            logger.warning(f"Task {task.get_name()} did not stop in {timeout}s, cancelling")
            task.cancel()
        if still_pending:
            await asyncio.gather(*still_pending, return_exceptions=True)
        logger.info("Registration tasks stopped")

    def status(self) -> Dict[str, Any]:
        """Snapshot used by the health endpoint."""
        last_cycle_at: Optional[str] = None
        if self.scheduler.last_cycle_at:
            last_cycle_at = self.scheduler.last_cycle_at.isoformat()
        return {
            "running": self.running,
            "bootstrap_completed": self.bootstrap.completed,
            "bootstrap_succeeded": self.bootstrap.succeeded,
            "scheduler_state": self.scheduler.state.value,
            "last_outcome": (
                self.scheduler.last_outcome.value if self.scheduler.last_outcome else None
            ),
            "last_cycle_at": last_cycle_at,
            "cycles_run": self.scheduler.cycles_run,
            "failed_tasks": sorted(self._failures),
        }
