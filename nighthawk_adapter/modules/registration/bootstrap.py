"""
Bootstrap Registrar.

Publishes the capability set available at startup once, so the adapter is
visible to the central server before the first reconciliation cycle.
"""

import logging
from typing import Optional

from nighthawk_adapter.context import AgentContext
from nighthawk_adapter.modules.registry import RegistrationError, RegistryClient

logger = logging.getLogger("nighthawk_adapter.registration.bootstrap")


class BootstrapRegistrar:
    """One-shot static capability registration."""

    def __init__(self, context: AgentContext, registry: RegistryClient):
        self.context = context
        self.registry = registry
        self.completed = False
        self.succeeded: Optional[bool] = None

    async def run(self) -> bool:
        """
        Register static components with the central server.

        This is best-effort - failure is logged and the periodic scheduler
        registers again on its own schedule.

        Returns:
            True if registration succeeded
        """
        server = self.context.server_address
        logger.info(f"Registering static components with {server}...")

        try:
            count = await self.registry.register(
                self.context.instance_id,
                server,
                self.context.service_address,
                self.context.port,
            )
        except RegistrationError as e:
            logger.error(f"Static component registration failed: {e}")
            self.succeeded = False
        else:
            logger.info(f"Successfully registered {count} static components with {server}.")
            self.succeeded = True
        finally:
            self.completed = True

        return self.succeeded
