"""
Registration Module - Black Box Interface

Purpose: Keep the adapter's capability advertisement current
Interface: RegistrationSupervisor.start(), stop(), status()
Hidden: Bootstrap registration, reconciliation cycle, scheduling

Runs beside the service; never blocks request handling.
"""

from .bootstrap import BootstrapRegistrar
from .scheduler import RE_REGISTER_INTERVAL, CycleOutcome, CycleState, PeriodicScheduler
from .supervisor import RegistrationSupervisor

__all__ = [
    "BootstrapRegistrar",
    "CycleOutcome",
    "CycleState",
    "PeriodicScheduler",
    "RE_REGISTER_INTERVAL",
    "RegistrationSupervisor",
]
