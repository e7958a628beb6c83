"""Expected output filenames of a generation step."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .toolchains import Toolchain
from .types import PlatformVariant
from .utils.errors import GDError, Err

BITCODE_SUFFIX = ".bc"
HEADER_SUFFIX = ".h"


@dataclass(frozen=True)
class ArtifactSet:
    library: Path
    header: Path
    intermediate: Path | None = None

    @property
    def outputs(self) -> tuple[Path, ...]:
        if self.intermediate is None:
            return (self.library, self.header)
        return (self.library, self.header, self.intermediate)

    @property
    def filenames(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.outputs)


def artifact_names(function_name: str, variant: PlatformVariant, toolchain: Toolchain) -> tuple[str, str, str | None]:
    """Return ``(library, header, intermediate)`` filenames for a variant."""

    header = f"{function_name}{HEADER_SUFFIX}"
    if variant == "bitcode-only":
        return f"{function_name}{BITCODE_SUFFIX}", header, None
    if variant == "msvc-archive":
        return (
            f"{function_name}{toolchain.static_lib_suffix}",
            header,
            f"{function_name}{toolchain.object_suffix}",
        )
    if variant in ("default", "ide-configuration-deferred"):
        return f"{function_name}{toolchain.static_lib_suffix}", header, None
    raise GDError(Err.INVALID_CONFIG, ctx={"reason": "unknown_variant", "variant": variant})


def artifact_set(
    scratch_dir: Path,
    function_name: str,
    variant: PlatformVariant,
    toolchain: Toolchain,
) -> ArtifactSet:
    library, header, intermediate = artifact_names(function_name, variant, toolchain)
    scratch = Path(scratch_dir)
    return ArtifactSet(
        library=scratch / library,
        header=scratch / header,
        intermediate=scratch / intermediate if intermediate else None,
    )
