"""
Shared pytest fixtures for Nighthawk adapter tests.

This module provides common fixtures including:
- Component definition writers for static and generated directories
- FakeRenderer: stands in for the external component generator
- An AgentContext rooted in a temporary directory
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nighthawk_adapter.config.provider import EnvConfigProvider
from nighthawk_adapter.context import create_context
from nighthawk_adapter.modules.generation import (
    BuildInfo,
    ComponentGenerationError,
    GenerationMethod,
)
from nighthawk_adapter.modules.registry import RegistryClient

TEST_INSTANCE_ID = "3f8e2c1a-0000-4000-8000-000000000001"
DEFAULT_URL = "https://example.com/default/nighthawk.yaml"


# =============================================================================
# Component Definition Helpers
# =============================================================================


def component_dict(kind: str, version: str, api_version: str = "nighthawk.io/v1alpha1") -> Dict[str, Any]:
    """Build a component definition dictionary as the generator writes it."""
    return {
        "kind": kind,
        "apiVersion": api_version,
        "displayName": kind,
        "format": "JSON",
        "model": {
            "name": "nighthawk",
            "version": version,
            "category": {"name": "Observability and Analysis"},
        },
        "metadata": {"published": True},
        "schema": json.dumps({"type": "object", "title": kind}),
    }


def write_components(directory: Path, version: str, kinds: List[str]) -> Path:
    """Write one JSON file per kind into ``directory/version``."""
    version_dir = directory / version
    version_dir.mkdir(parents=True, exist_ok=True)
    for kind in kinds:
        with open(version_dir / f"{kind}.json", "w") as f:
            json.dump(component_dict(kind, version), f)
    return version_dir


class FakeRenderer:
    """
    Stand-in for the external component generator.

    Writes the configured kinds into the output directory, or raises when
    configured to fail. Every call is recorded for assertions.
    """

    def __init__(self, kinds: Optional[List[str]] = None, error: Optional[str] = None):
        self.kinds = kinds if kinds is not None else ["NighthawkTest", "NighthawkService"]
        self.error = error
        self.calls: List[Tuple[str, str, GenerationMethod, Path]] = []

    def generate(self, version, url, method, output_path, model_path=None, model_config=None):
        self.calls.append((version, url, method, Path(output_path)))
        if self.error:
            # Leave something behind so cleanup is exercised
            with open(Path(output_path) / "partial.json", "w") as f:
                json.dump(component_dict("Partial", version), f)
            raise ComponentGenerationError(version, self.error)
        for kind in self.kinds:
            with open(Path(output_path) / f"{kind}.json", "w") as f:
                json.dump(component_dict(kind, version), f)


# =============================================================================
# Context Fixtures
# =============================================================================


@pytest.fixture
def model_path(tmp_path) -> Path:
    """Model directory with bundled components for v1.0.0 and v2."""
    path = tmp_path / "meshmodel"
    write_components(path / "components", "v1.0.0", ["NighthawkTest"])
    write_components(path / "components", "v2", ["NighthawkTest", "NighthawkService"])
    return path


@pytest.fixture
def build_info(model_path) -> BuildInfo:
    """BuildInfo whose latest version is bundled statically."""
    return BuildInfo(
        latest_version="v2",
        default_url=DEFAULT_URL,
        default_method=GenerationMethod.MANIFEST,
        model_path=model_path,
        model_config={"name": "nighthawk"},
        sources={"v2": (DEFAULT_URL, GenerationMethod.MANIFEST)},
    )


@pytest.fixture
def environ(tmp_path) -> Dict[str, str]:
    """Mutable environment read by the config provider on every call."""
    return {
        "ADAPTER_ROOT": str(tmp_path / "root"),
        "MESHERY_SERVER": "meshery.test:9081",
        "SERVICE_ADDR": "nighthawk.test",
        "SERVICE_PORT": "10013",
    }


@pytest.fixture
def config_provider(environ) -> EnvConfigProvider:
    return EnvConfigProvider(environ)


@pytest.fixture
def agent_context(config_provider, build_info):
    """AgentContext rooted in a temporary directory."""
    return create_context(config_provider, build_info=build_info, instance_id=TEST_INSTANCE_ID)


@pytest.fixture
def mock_registry():
    """Registry client whose register() succeeds without network access."""
    registry = MagicMock(spec=RegistryClient)
    registry.register = AsyncMock(return_value=3)
    return registry


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
