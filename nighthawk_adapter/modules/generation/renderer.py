"""
Renderer interface and the default command-line renderer.

The rendering engine itself is external: the adapter only hands it a
source, a method and an output directory.
"""

import json
import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Any, List, Mapping, Optional, Protocol

from .generation import ComponentGenerationError, GenerationMethod

logger = logging.getLogger("nighthawk_adapter.generation.renderer")

MODEL_CONFIG_ENV = "COMP_GEN_MODEL_CONFIG"


class Renderer(Protocol):
    """Protocol for render services - allows swappable implementations."""

    def generate(
        self,
        version: str,
        url: str,
        method: GenerationMethod,
        output_path: Path,
        model_path: Optional[Path] = None,
        model_config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Render component definitions for a version into ``output_path``.

        Raises:
            ComponentGenerationError: If the source cannot be rendered
        """
        ...


class CommandRenderer:
    """Renderer that shells out to an external generator command."""

    def __init__(self, command_template: str, timeout: Optional[float] = None):
        """
        Initialize command renderer.

        Args:
            command_template: Command line with {url}, {method}, {version},
                {output} and {model_path} placeholders
            timeout: Optional subprocess timeout in seconds
        """
        self.command_template = command_template
        self.timeout = timeout

    def build_command(
        self,
        version: str,
        url: str,
        method: GenerationMethod,
        output_path: Path,
        model_path: Optional[Path] = None,
    ) -> List[str]:
        """Expand the template into an argument list."""
        values = {
            "url": url,
            "method": method.value,
            "version": version,
            "output": str(output_path),
            "model_path": str(model_path) if model_path else "",
        }
        try:
            return [part.format(**values) for part in shlex.split(self.command_template)]
        except (KeyError, ValueError) as e:
            raise ComponentGenerationError(version, f"invalid generator command template: {e}")

    def generate(
        self,
        version: str,
        url: str,
        method: GenerationMethod,
        output_path: Path,
        model_path: Optional[Path] = None,
        model_config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Run the generator command and fail on a non-zero exit."""
        cmd = self.build_command(version, url, method, output_path, model_path)
        env = dict(os.environ)
        env[MODEL_CONFIG_ENV] = json.dumps(dict(model_config or {}))

        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            process = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
                env=env,
            )
        except FileNotFoundError:
            raise ComponentGenerationError(version, f"generator command not found: {cmd[0]}")
        except subprocess.TimeoutExpired:
            raise ComponentGenerationError(version, f"generator timed out after {self.timeout}s")

        if process.returncode != 0:
            detail = (process.stderr or process.stdout or "").strip()
            raise ComponentGenerationError(
                version, f"generator exited with {process.returncode}: {detail}"
            )

        if process.stdout:
            logger.debug(process.stdout.strip())
