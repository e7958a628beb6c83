"""Data structures backing build manifests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..models import GeneratorRequest
from ..types import TargetKind


@dataclass(frozen=True)
class TargetDecl:
    """A host target the generators can depend on or feed."""

    name: str
    kind: TargetKind
    depends: Sequence[str] = ()


@dataclass(frozen=True)
class BuildManifest:
    """Top-level manifest bundle loaded from disk."""

    build_root: Path
    toolchain: str | None
    targets: Sequence[TargetDecl]
    generators: Sequence[GeneratorRequest]
    source: Path | None = None
