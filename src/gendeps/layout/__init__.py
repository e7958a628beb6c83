"""Filesystem layout: build-root paths and generator scratch directories."""

from .paths import Paths
from .scratch import ScratchClaim, ScratchRegistry, generator_output_path, scratch_key

__all__ = ["Paths", "ScratchClaim", "ScratchRegistry", "generator_output_path", "scratch_key"]
