"""
Config Module - Black Box Interface

Purpose: Adapter configuration management
Interface: EnvConfigProvider.get_service_config(), get_registration_config()
Hidden: Environment parsing, defaults, address normalization

Can be replaced with any provider implementing the ConfigProvider protocol.
"""

from .provider import (
    ConfigProvider,
    ConfigurationError,
    EnvConfigProvider,
    RegistrationConfig,
    ServiceConfig,
    normalize_server_address,
)

__all__ = [
    "ConfigProvider",
    "ConfigurationError",
    "EnvConfigProvider",
    "RegistrationConfig",
    "ServiceConfig",
    "normalize_server_address",
]
