"""Declarative build-graph entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..types import LINKABLE_KINDS, TargetKind


@dataclass(frozen=True)
class Command:
    argv: tuple[str, ...]
    description: str = ""


@dataclass(frozen=True)
class CustomCommand:
    """A node that runs ``commands`` in order and produces ``outputs``.

    ``depends`` names upstream nodes (build order); ``inputs`` are the files
    whose timestamps decide whether the outputs are stale.
    """

    node_id: str
    outputs: tuple[Path, ...]
    depends: tuple[str, ...]
    commands: tuple[Command, ...]
    working_dir: Path
    inputs: tuple[Path, ...] = ()
    comment: str = ""


@dataclass
class Target:
    name: str
    kind: TargetKind
    depends: list[str] = field(default_factory=list)
    link_libraries: list[Path] = field(default_factory=list)
    include_dirs: list[tuple[str, Path]] = field(default_factory=list)
    folder: str | None = None

    @property
    def linkable(self) -> bool:
        return self.kind in LINKABLE_KINDS
