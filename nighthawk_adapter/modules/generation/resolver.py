"""
Generation Resolver.

Decides, for one reconciliation cycle, whether components must be
regenerated and from which source.
"""

import logging
from pathlib import Path
from typing import Optional

from nighthawk_adapter.modules.capability import AvailabilityTable

from .build import BuildInfo
from .generation import GenerationConfig, GenerationMethod

logger = logging.getLogger("nighthawk_adapter.generation.resolver")


class GenerationResolver:
    """Resolve a version into a build plan or a skip."""

    def __init__(self, availability: AvailabilityTable, build_info: BuildInfo, output_root: Path):
        """
        Initialize resolver.

        Args:
            availability: Read-only table of bundled versions
            build_info: Compiled-in sources and model references
            output_root: Directory generated versions are written under
        """
        self.availability = availability
        self.build_info = build_info
        self.output_root = Path(output_root)

    def resolve(
        self,
        version: str,
        force: bool = False,
        url_override: Optional[str] = None,
        method_override: Optional[str] = None,
    ) -> Optional[GenerationConfig]:
        """
        Resolve the generation config for a version.

        Args:
            version: Target version
            force: Bypass the availability check
            url_override: Source URL replacing the compiled-in default
            method_override: Method accompanying ``url_override``

        Returns:
            A fully specified GenerationConfig, or None when generation is skipped
        """
        if not force and self.availability.is_available(version):
            logger.info(
                f"Components available statically for version {version}. "
                "Skipping dynamic component registration"
            )
            return None

        url, method = self.build_info.default_source(version)

        # The override only applies as a pair; an unrecognized method discards the URL too
        override_method = GenerationMethod.parse(method_override)
        if url_override and override_method is not None:
            url, method = url_override, override_method
            logger.info(
                f"Registering workload components from url {url} using {method.value} method..."
            )
        elif url_override or method_override:
            logger.warning(
                f"Ignoring generation override (url={url_override!r}, method={method_override!r}): "
                f"a URL and one of {[m.value for m in GenerationMethod]} are both required"
            )

        return GenerationConfig(
            url=url,
            method=method,
            version=version,
            output_path=self.output_root / version,
            model_path=self.build_info.model_path,
            model_config=self.build_info.model_config,
        )
