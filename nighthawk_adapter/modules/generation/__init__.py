"""
Generation Module - Black Box Interface

Purpose: Decide when components must be regenerated and regenerate them
Interface: GenerationResolver.resolve(), ComponentBuilder.build()
Hidden: Source selection rules, external renderer invocation, atomic install

The renderer is replaceable: anything implementing the Renderer protocol works.
"""

from .build import BuildInfo
from .builder import ComponentBuilder
from .generation import ComponentGenerationError, GenerationConfig, GenerationMethod
from .renderer import CommandRenderer, Renderer
from .resolver import GenerationResolver

__all__ = [
    "BuildInfo",
    "CommandRenderer",
    "ComponentBuilder",
    "ComponentGenerationError",
    "GenerationConfig",
    "GenerationMethod",
    "GenerationResolver",
    "Renderer",
]
