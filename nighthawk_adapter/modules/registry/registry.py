"""
Registry Client for the Nighthawk adapter.

Publishes the locally available capability set to the central server's
model registry. Every component definition is posted individually along with
the host the adapter can be reached on; the server keys registrations by
host and component, so publishing the same set again is a no-op there.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from nighthawk_adapter.modules.capability import CapabilitySet, ComponentDefinition, ComponentStore

logger = logging.getLogger("nighthawk_adapter.registry")

REGISTER_PATH = "/api/meshmodels/register"


class RegistrationError(Exception):
    """Raised when the capability set could not be published."""


def build_registration_payload(
    component: ComponentDefinition,
    instance_id: str,
    local_address: str,
    port: int,
) -> Dict[str, Any]:
    """Request body registering one component for this adapter instance."""
    return {
        "host": {
            "hostname": local_address,
            "port": int(port),
            "metadata": {"instance_id": instance_id},
        },
        "entityType": "component",
        "entity": component.to_dict(),
    }


class RegistryClient:
    """Publish capability sets to the central server."""

    def __init__(
        self,
        store: ComponentStore,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize registry client.

        Args:
            store: Source of the capability set to advertise
            timeout: HTTP timeout in seconds per request
            transport: Optional httpx transport (used by tests)
        """
        self.store = store
        self.timeout = timeout
        self._transport = transport

    async def register(
        self,
        instance_id: str,
        server_address: str,
        local_address: str,
        port: int,
        capabilities: Optional[CapabilitySet] = None,
    ) -> int:
        """
        Register the current capability set with the central server.

        Args:
            instance_id: Identity of this adapter process
            server_address: Base URL of the central server
            local_address: Address advertised for this adapter
            port: Port advertised for this adapter
            capabilities: Set to publish; defaults to everything in the store

        Returns:
            Number of component definitions published

        Raises:
            RegistrationError: If nothing is available or any request fails
        """
        if capabilities is None:
            try:
                capabilities = await asyncio.to_thread(self.store.load)
            except (OSError, ValueError) as e:
                raise RegistrationError(f"Failed to load capability set: {e}") from e

        if capabilities.is_empty:
            raise RegistrationError("No component definitions available to register")

        url = f"{server_address.rstrip('/')}{REGISTER_PATH}"
        published = 0

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for component in capabilities:
                payload = build_registration_payload(component, instance_id, local_address, port)
                try:
                    response = await client.post(url, json=payload)
                except (httpx.HTTPError, httpx.InvalidURL) as e:
                    raise RegistrationError(f"Could not reach {url}: {e}") from e

                if not response.is_success:
                    raise RegistrationError(
                        f"Registration of {component.kind} ({component.model_version}) "
                        f"rejected with {response.status_code}: {response.text}"
                    )
                published += 1

        logger.debug(f"Published {published} components to {url}")
        return published
