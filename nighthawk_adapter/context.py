"""Adapter context with dependency injection."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from nighthawk_adapter.config.provider import (
    ConfigProvider,
    ConfigurationError,
    RegistrationConfig,
    ServiceConfig,
)
from nighthawk_adapter.modules.capability import AvailabilityTable, ComponentStore
from nighthawk_adapter.modules.generation import BuildInfo

logger = logging.getLogger("nighthawk_adapter.context")


@dataclass(frozen=True)
class AgentContext:
    """Immutable context holding identity and shared state for registration.

    Created once at process start and passed to the bootstrap registrar,
    scheduler, resolver, builder and registry client. Frozen so nothing can
    swap the identity or availability table at runtime.
    """

    instance_id: str
    build_info: BuildInfo
    service: ServiceConfig
    registration: RegistrationConfig
    availability: AvailabilityTable
    store: ComponentStore
    config_provider: ConfigProvider
    started_at: datetime

    @property
    def port(self) -> int:
        return self.service.port

    @property
    def server_address(self) -> str:
        return self.registration.server_address

    @property
    def service_address(self) -> str:
        return self.registration.service_address

    def current_registration(self) -> RegistrationConfig:
        """Re-read registration overrides; used once per reconciliation cycle."""
        return self.config_provider.get_registration_config()


def ensure_directories(service: ServiceConfig) -> None:
    """
    Create the directories the adapter expects to exist.

    Raises:
        ConfigurationError: If a directory cannot be created
    """
    for path in (service.bin_path, service.components_path):
        try:
            path.mkdir(parents=True, exist_ok=True, mode=0o750)
        except OSError as e:
            raise ConfigurationError(f"Cannot create directory {path}: {e}") from e


def create_context(
    config_provider: ConfigProvider,
    build_info: Optional[BuildInfo] = None,
    instance_id: Optional[str] = None,
) -> AgentContext:
    """
    Build the adapter context.

    Args:
        config_provider: Source of service and registration settings
        build_info: Compiled-in defaults (loaded from the package if omitted)
        instance_id: Fixed identity, mainly for tests; a new UUID otherwise

    Raises:
        ConfigurationError: If settings are invalid or directories cannot be created
    """
    service = config_provider.get_service_config()
    registration = config_provider.get_registration_config()
    ensure_directories(service)

    if build_info is None:
        try:
            build_info = BuildInfo.load()
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot load model config: {e}") from e

    availability = AvailabilityTable.from_directory(build_info.static_components_path)
    store = ComponentStore(build_info.static_components_path, service.components_path)

    context = AgentContext(
        instance_id=instance_id or str(uuid.uuid4()),
        build_info=build_info,
        service=service,
        registration=registration,
        availability=availability,
        store=store,
        config_provider=config_provider,
        started_at=datetime.now(timezone.utc),
    )
    logger.info(
        f"Adapter context created (instance: {context.instance_id}, "
        f"static versions: {availability.versions})"
    )
    return context
