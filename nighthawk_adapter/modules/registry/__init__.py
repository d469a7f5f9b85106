"""
Registry Module - Black Box Interface

Purpose: Publish the adapter's capability set to the central server
Interface: RegistryClient.register()
Hidden: HTTP transport, payload layout, per-component requests

Publishing is idempotent; callers may register the same set any number of times.
"""

from .registry import RegistrationError, RegistryClient, build_registration_payload

__all__ = ["RegistrationError", "RegistryClient", "build_registration_payload"]
