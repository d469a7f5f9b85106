"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import httpx


DEFAULT_SERVER_ADDRESS = "http://localhost:9081"
DEFAULT_SERVICE_ADDRESS = "localhost"
DEFAULT_SERVICE_PORT = 10013
DEFAULT_ROOT_PATH = "~/.meshery/nighthawk"
DEFAULT_GENERATION_COMMAND = (
    "mesheryctl registry generate --url {url} --method {method} "
    "--version {version} --output {output} --model-path {model_path}"
)


class ConfigurationError(ValueError):
    """Raised when required settings are missing or malformed."""


@dataclass
class ServiceConfig:
    """Service surface configuration."""
    host: str
    port: int
    debug: bool
    log_level: str
    root_path: Path

    @property
    def bin_path(self) -> Path:
        """Directory the adapter expects to exist before anything else runs."""
        return self.root_path / "bin"

    @property
    def components_path(self) -> Path:
        """Directory holding dynamically generated component definitions."""
        return self.root_path / "components"


@dataclass
class RegistrationConfig:
    """Capability registration configuration."""
    server_address: str
    service_address: str
    force_dynamic_registration: bool
    generation_url: Optional[str]
    generation_method: Optional[str]
    generation_command: str
    registry_timeout: float


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_service_config(self) -> ServiceConfig:
        """Get service configuration."""
        ...

    def get_registration_config(self) -> RegistrationConfig:
        """Get registration configuration."""
        ...


def normalize_server_address(address: Optional[str]) -> str:
    """Return the central server address with an explicit scheme."""
    if not address:
        return DEFAULT_SERVER_ADDRESS
    if not address.startswith("http"):
        address = f"http://{address}"
    try:
        url = httpx.URL(address)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"MESHERY_SERVER is not a valid address: {address} ({e})") from e
    if not url.host:
        raise ConfigurationError(f"MESHERY_SERVER has no host: {address}")
    return address


class EnvConfigProvider:
    """Environment-based configuration provider.

    Values are read on every call so that overrides changed between
    reconciliation cycles are picked up.
    """

    def __init__(self, environ=None):
        self._environ = os.environ if environ is None else environ

    def _get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._environ.get(key)
        if value is None or value == "":
            return default
        return value

    def _get_bool(self, key: str) -> bool:
        return (self._get(key, "false") or "false").lower() == "true"

    def get_service_config(self) -> ServiceConfig:
        """Get service configuration from environment variables."""
        port_env = self._get("SERVICE_PORT", str(DEFAULT_SERVICE_PORT))
        try:
            port = int(port_env)
        except ValueError:
            raise ConfigurationError(f"SERVICE_PORT must be an integer, got {port_env!r}")
        if not 0 < port < 65536:
            raise ConfigurationError(f"SERVICE_PORT out of range: {port}")

        debug = self._get_bool("DEBUG")
        log_level = self._get("LOG_LEVEL", "DEBUG" if debug else "INFO").upper()

        return ServiceConfig(
            host=self._get("SERVICE_HOST", "0.0.0.0"),
            port=port,
            debug=debug,
            log_level=log_level,
            root_path=Path(self._get("ADAPTER_ROOT", DEFAULT_ROOT_PATH)).expanduser(),
        )

    def get_registration_config(self) -> RegistrationConfig:
        """Get registration configuration from environment variables."""
        timeout_env = self._get("REGISTRY_TIMEOUT", "30")
        try:
            timeout = float(timeout_env)
        except ValueError:
            raise ConfigurationError(f"REGISTRY_TIMEOUT must be a number, got {timeout_env!r}")
        if timeout <= 0:
            raise ConfigurationError(f"REGISTRY_TIMEOUT must be positive, got {timeout}")

        return RegistrationConfig(
            server_address=normalize_server_address(self._get("MESHERY_SERVER")),
            service_address=self._get("SERVICE_ADDR", DEFAULT_SERVICE_ADDRESS),
            force_dynamic_registration=self._get_bool("FORCE_DYNAMIC_REG"),
            generation_url=self._get("COMP_GEN_URL"),
            generation_method=self._get("COMP_GEN_METHOD"),
            generation_command=self._get("COMP_GEN_COMMAND", DEFAULT_GENERATION_COMMAND),
            registry_timeout=timeout,
        )
