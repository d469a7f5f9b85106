"""
Compiled-in build information.

The version constants are rewritten by the release pipeline; the defaults
here describe a development build.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

from .generation import GenerationMethod

logger = logging.getLogger("nighthawk_adapter.build")

SERVICE_NAME = "meshery-nighthawk"
VERSION = "edge"
GIT_SHA = "none"

LATEST_VERSION = "v1.0.0"
DEFAULT_GENERATION_URL = (
    "https://raw.githubusercontent.com/meshery/meshery-nighthawk/master/"
    "templates/manifests/nighthawk-crds.yaml"
)
DEFAULT_GENERATION_METHOD = GenerationMethod.MANIFEST

MESH_MODEL_PATH = Path(__file__).resolve().parent.parent.parent / "templates" / "meshmodel"
MESH_MODEL_CONFIG_FILE = MESH_MODEL_PATH / "model.yaml"

# Per-version sources; versions not listed fall back to the default URL and method.
DEFAULT_SOURCES: Dict[str, Tuple[str, GenerationMethod]] = {
    LATEST_VERSION: (DEFAULT_GENERATION_URL, DEFAULT_GENERATION_METHOD),
}


def load_model_config(path: Path = MESH_MODEL_CONFIG_FILE) -> Dict[str, Any]:
    """Load the model config handed to the renderer."""
    if not path.exists():
        logger.warning(f"Model config not found: {path}, using empty config")
        return {}
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Model config {path} must be a mapping")
    return data


@dataclass(frozen=True)
class BuildInfo:
    """Immutable build-time defaults for this adapter."""

    service_name: str = SERVICE_NAME
    version: str = VERSION
    git_sha: str = GIT_SHA
    latest_version: str = LATEST_VERSION
    default_url: str = DEFAULT_GENERATION_URL
    default_method: GenerationMethod = DEFAULT_GENERATION_METHOD
    model_path: Path = MESH_MODEL_PATH
    model_config: Mapping[str, Any] = field(default_factory=dict)
    sources: Mapping[str, Tuple[str, GenerationMethod]] = field(
        default_factory=lambda: dict(DEFAULT_SOURCES)
    )

    @property
    def static_components_path(self) -> Path:
        """Directory of bundled component definitions, one subdirectory per version."""
        return self.model_path / "components"

    def default_source(self, version: str) -> Tuple[str, GenerationMethod]:
        """Compiled-in source URL and method for a version."""
        return self.sources.get(version, (self.default_url, self.default_method))

    @classmethod
    def load(cls) -> "BuildInfo":
        """Build info with the bundled model config applied."""
        return cls(model_config=load_model_config())
