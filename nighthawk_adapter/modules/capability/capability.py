"""
Capability Module for the Nighthawk adapter.

This module models the component definitions the adapter advertises to the
central server and the local stores they are loaded from.

Design Principles:
- Version-keyed: every component definition belongs to exactly one version
- Wholesale replacement: a version's definitions are loaded as a unit
- Read-only availability: the bundled table is never mutated after startup
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

logger = logging.getLogger("nighthawk_adapter.capability")


class ComponentFormatError(ValueError):
    """Raised when a component definition file cannot be interpreted."""


@dataclass
class ComponentDefinition:
    """
    A single component definition advertised to the central server.

    Serialized in the camelCase layout the server's model registry expects.
    """

    kind: str
    api_version: str
    display_name: str
    model_name: str
    model_version: str
    category: Optional[str] = None
    schema: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> Tuple[str, str, str]:
        """Identity of the definition within a capability set."""
        return (self.model_version, self.api_version, self.kind)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        model: Dict[str, Any] = {"name": self.model_name, "version": self.model_version}
        if self.category:
            model["category"] = {"name": self.category}
        return {
            "kind": self.kind,
            "apiVersion": self.api_version,
            "displayName": self.display_name,
            "format": "JSON",
            "model": model,
            "metadata": dict(self.metadata),
            "schema": self.schema,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentDefinition":
        """Create from dictionary (e.g., from a component JSON file)."""
        if not isinstance(data, dict):
            raise ComponentFormatError("Component definition must be a JSON object")

        model = data.get("model") or {}
        kind = data.get("kind")
        if not kind:
            raise ComponentFormatError("Component definition is missing 'kind'")
        if not model.get("version"):
            raise ComponentFormatError(f"Component {kind} is missing 'model.version'")

        category = model.get("category")
        if isinstance(category, dict):
            category = category.get("name")

        schema = data.get("schema", "")
        if not isinstance(schema, str):
            schema = json.dumps(schema, sort_keys=True)

        return cls(
            kind=kind,
            api_version=data.get("apiVersion", ""),
            display_name=data.get("displayName") or kind,
            model_name=model.get("name", ""),
            model_version=model["version"],
            category=category,
            schema=schema,
            metadata=data.get("metadata") or {},
        )

    @classmethod
    def from_file(cls, path: Path) -> "ComponentDefinition":
        """Load a definition from a JSON file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ComponentFormatError(f"{path.name}: invalid JSON ({e})") from e
        return cls.from_dict(data)


def load_component_dir(path: Path) -> List[ComponentDefinition]:
    """
    Load every ``*.json`` definition in a version directory.

    Files are read in name order so repeated loads of the same directory
    yield equal lists.
    """
    return [ComponentDefinition.from_file(p) for p in sorted(path.glob("*.json"))]


@dataclass
class CapabilitySet:
    """Component definitions currently advertised, keyed by version."""

    versions: Dict[str, List[ComponentDefinition]] = field(default_factory=dict)

    def __len__(self) -> int:
        return sum(len(components) for components in self.versions.values())

    def __iter__(self) -> Iterator[ComponentDefinition]:
        for version in sorted(self.versions):
            yield from self.versions[version]

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def for_version(self, version: str) -> "CapabilitySet":
        """Return the subset of this set belonging to one version."""
        if version not in self.versions:
            return CapabilitySet()
        return CapabilitySet({version: list(self.versions[version])})

    def merged(self, other: "CapabilitySet") -> "CapabilitySet":
        """Combine two sets; versions present in ``other`` replace ours wholesale."""
        combined = {version: list(components) for version, components in self.versions.items()}
        for version, components in other.versions.items():
            combined[version] = list(components)
        return CapabilitySet(combined)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            version: [component.to_dict() for component in self.versions[version]]
            for version in sorted(self.versions)
        }

    @classmethod
    def from_directory(cls, root: Path) -> "CapabilitySet":
        """Load every version directory under ``root``."""
        versions: Dict[str, List[ComponentDefinition]] = {}
        if not root.is_dir():
            return cls()
        for version_dir in sorted(p for p in root.iterdir() if p.is_dir()):
            if version_dir.name.startswith("."):
                continue
            components = load_component_dir(version_dir)
            if components:
                versions[version_dir.name] = components
        return cls(versions)


class AvailabilityTable:
    """
    Read-only mapping of version to whether components are bundled locally.

    Built once at startup and shared by the bootstrap registrar and the
    periodic scheduler without locking.
    """

    def __init__(self, entries: Mapping[str, bool]):
        self._entries = MappingProxyType(dict(entries))

    def is_available(self, version: str) -> bool:
        """Membership test used by the generation resolver."""
        return bool(self._entries.get(version, False))

    def __contains__(self, version: object) -> bool:
        return isinstance(version, str) and self.is_available(version)

    @property
    def versions(self) -> List[str]:
        return sorted(v for v, present in self._entries.items() if present)

    @property
    def entries(self) -> Mapping[str, bool]:
        return self._entries

    @classmethod
    def from_directory(cls, root: Path) -> "AvailabilityTable":
        """Mark every version directory under ``root`` holding definitions."""
        entries: Dict[str, bool] = {}
        if root.is_dir():
            for version_dir in root.iterdir():
                if version_dir.is_dir() and not version_dir.name.startswith("."):
                    entries[version_dir.name] = any(version_dir.glob("*.json"))
        logger.debug(f"Availability table built from {root}: {entries}")
        return cls(entries)


class ComponentStore:
    """
    Local view of all component definitions available to advertise.

    Bundled (static) definitions are merged with dynamically generated ones;
    a generated version replaces the bundled version of the same name.
    """

    def __init__(self, static_path: Path, generated_path: Path):
        self.static_path = Path(static_path)
        self.generated_path = Path(generated_path)

    def load_static(self) -> CapabilitySet:
        return CapabilitySet.from_directory(self.static_path)

    def load_generated(self) -> CapabilitySet:
        return CapabilitySet.from_directory(self.generated_path)

    def load(self) -> CapabilitySet:
        """Load the full capability set currently available."""
        return self.load_static().merged(self.load_generated())

    def version_path(self, version: str) -> Path:
        """Output location of generated definitions for a version."""
        return self.generated_path / version
