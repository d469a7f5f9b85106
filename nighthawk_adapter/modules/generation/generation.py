"""
Generation types shared by the resolver, builder and renderers.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional

CHART_SUFFIXES = (".tgz", ".tar.gz")
MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")


class GenerationMethod(str, Enum):
    """How a source is turned into component definitions."""

    MANIFEST = "Manifest"
    HELM = "Helm"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["GenerationMethod"]:
        """Return the matching method, or None for anything outside the enumeration."""
        if isinstance(value, cls):
            return value
        for method in cls:
            if method.value == value:
                return method
        return None


class ComponentGenerationError(Exception):
    """Raised when a build attempt cannot produce a capability set."""

    def __init__(self, version: str, message: str):
        self.version = version
        super().__init__(f"component generation for version {version} failed: {message}")


@dataclass(frozen=True)
class GenerationConfig:
    """Fully specified parameters for one build attempt."""

    url: str
    method: GenerationMethod
    version: str
    output_path: Path
    model_path: Optional[Path] = None
    model_config: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.url:
            raise ValueError("Generation config requires a source URL")
        if not isinstance(self.method, GenerationMethod):
            raise ValueError(f"Invalid generation method: {self.method!r}")
        if not self.version:
            raise ValueError("Generation config requires a version")

    @property
    def source_kind(self) -> Optional[GenerationMethod]:
        """Method implied by the source URL's extension, if any."""
        path = self.url.split("?", 1)[0].lower()
        if path.endswith(CHART_SUFFIXES):
            return GenerationMethod.HELM
        if path.endswith(MANIFEST_SUFFIXES):
            return GenerationMethod.MANIFEST
        return None

    def check_consistency(self) -> None:
        """
        Ensure the method matches the source.

        A chart archive requires the Helm method and a manifest file requires
        the Manifest method. URLs without a recognizable extension are accepted.

        Raises:
            ComponentGenerationError: If the URL and method disagree
        """
        implied = self.source_kind
        if implied is not None and implied is not self.method:
            raise ComponentGenerationError(
                self.version,
                f"source {self.url} requires the {implied.value} method, "
                f"got {self.method.value}",
            )
