"""
API Module - Black Box Interface

Purpose: Response models for the adapter's HTTP surface
Interface: HealthResponse, CapabilitiesResponse, RegistrationStatus
Hidden: Nothing - plain data contracts
"""

from .models import CapabilitiesResponse, HealthResponse, RegistrationStatus

__all__ = ["CapabilitiesResponse", "HealthResponse", "RegistrationStatus"]
