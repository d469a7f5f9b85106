"""
Component Builder.

Runs a renderer for a resolved GenerationConfig and installs its output as
the capability set for that version. Output is rendered into a hidden
temporary directory beside the target and only renamed into place once it
has been validated, so a failed build never leaves a partial version behind.
"""

import asyncio
import logging
import os
import shutil
import tempfile
import uuid
from pathlib import Path

from nighthawk_adapter.modules.capability import (
    CapabilitySet,
    ComponentFormatError,
    load_component_dir,
)

from .generation import ComponentGenerationError, GenerationConfig
from .renderer import Renderer

logger = logging.getLogger("nighthawk_adapter.generation.builder")


class ComponentBuilder:
    """Build capability sets from external sources."""

    def __init__(self, renderer: Renderer):
        self.renderer = renderer

    async def build(self, config: GenerationConfig) -> CapabilitySet:
        """Build without blocking the event loop."""
        return await asyncio.to_thread(self.build_sync, config)

    def build_sync(self, config: GenerationConfig) -> CapabilitySet:
        """
        Render, validate and install components for ``config.version``.

        Args:
            config: Fully specified generation config

        Returns:
            The capability set now stored for the version

        Raises:
            ComponentGenerationError: If rendering or validation fails
        """
        config.check_consistency()

        target = Path(config.output_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=f".{target.name}-", dir=target.parent))
            staging.chmod(0o750)
        except OSError as e:
            raise ComponentGenerationError(config.version, f"cannot prepare output: {e}") from e

        try:
            self.renderer.generate(
                config.version,
                config.url,
                config.method,
                staging,
                model_path=config.model_path,
                model_config=config.model_config,
            )
            self._validate(config, staging)
            self._install(staging, target)
        except (OSError, ComponentFormatError) as e:
            raise ComponentGenerationError(config.version, str(e)) from e
        finally:
            # Gone after a successful install; otherwise whatever the renderer left
            shutil.rmtree(staging, ignore_errors=True)

        components = load_component_dir(target)

        # The line below is checked by the component generation workflow; keep it verbatim
        logger.info(f"Component creation completed for version {config.version}")

        return CapabilitySet({config.version: components})

    def _validate(self, config: GenerationConfig, staging: Path) -> None:
        components = load_component_dir(staging)
        if not components:
            raise ComponentGenerationError(
                config.version, f"no component definitions rendered from {config.url}"
            )

        foreign = sorted({c.model_version for c in components} - {config.version})
        if foreign:
            logger.warning(
                f"Rendered components for version {config.version} "
                f"declare model versions {foreign}"
            )
        logger.debug(f"Rendered {len(components)} components for version {config.version}")

    @staticmethod
    def _install(staging: Path, target: Path) -> None:
        """Replace ``target`` with ``staging`` using renames only."""
        if not target.exists():
            os.replace(staging, target)
            return

        backup = target.with_name(f".{target.name}.old-{uuid.uuid4().hex[:8]}")
        os.replace(target, backup)
        try:
            os.replace(staging, target)
        except OSError:
            os.replace(backup, target)
            raise
        shutil.rmtree(backup, ignore_errors=True)
