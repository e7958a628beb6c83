from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from ..types import TargetKind
from .model import CustomCommand


@runtime_checkable
class BuildGraph(Protocol):
    """Primitives the host build system exposes for declaring nodes and edges."""

    def add_custom_command(self, node: CustomCommand) -> None:
        ...

    def add_aggregate(self, name: str, depends: Sequence[str], *, folder: str | None = None) -> None:
        ...

    def add_dependency(self, target: str, dependency: str) -> None:
        """Make ``target`` build only after ``dependency``."""
        ...

    def add_link_library(self, target: str, library: Path) -> None:
        ...

    def add_include_directory(self, target: str, directory: Path, *, scope: str = "PRIVATE") -> None:
        ...

    def target_kind(self, name: str) -> TargetKind | None:
        """Kind of a declared target, or None when no such target exists."""
        ...
