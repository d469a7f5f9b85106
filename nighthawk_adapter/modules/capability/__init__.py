"""
Capability Module - Black Box Interface

Purpose: Model and load the component definitions the adapter advertises
Interface: CapabilitySet, ComponentDefinition, AvailabilityTable, ComponentStore
Hidden: On-disk layout, JSON parsing, static/generated merge rules

Consumers only ask "what is available" - never where it lives.
"""

from .capability import (
    AvailabilityTable,
    CapabilitySet,
    ComponentDefinition,
    ComponentFormatError,
    ComponentStore,
    load_component_dir,
)

__all__ = [
    "AvailabilityTable",
    "CapabilitySet",
    "ComponentDefinition",
    "ComponentFormatError",
    "ComponentStore",
    "load_component_dir",
]
