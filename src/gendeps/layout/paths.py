from __future__ import annotations

"""Build-root aware path helpers for generator executables and scratch dirs."""

from dataclasses import dataclass
from pathlib import Path

from ..toolchains import Toolchain
from ..types import PlatformVariant
from ..utils.errors import GDError, Err

BIN_DIRNAME = "bin"
SCRATCH_PREFIX = "scratch_"


@dataclass(frozen=True)
class Paths:
    """Project path helper bound to a build root."""

    build_root: Path

    def __post_init__(self):
        if self.build_root is None or str(self.build_root).strip() == "":
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"reason": "paths_missing_build_root"},
            )
        object.__setattr__(self, "build_root", Path(self.build_root))

    @classmethod
    def from_str(cls, build_root: str) -> "Paths":
        return cls(Path(build_root))

    @property
    def bin_dir(self) -> Path:
        return self.build_root / BIN_DIRNAME

    def scratch_dir(self, key: str) -> Path:
        return self.build_root / f"{SCRATCH_PREFIX}{key}"

    def generator_executable(
        self,
        generator_target: str,
        toolchain: Toolchain,
        variant: PlatformVariant,
    ) -> Path:
        """Location of a built generator executable.

        Multi-configuration toolchains place it in a per-configuration
        directory whose name is left as the toolchain placeholder, whatever
        the variant.
        """

        filename = f"{generator_target}{toolchain.executable_suffix}"
        if toolchain.configuration_placeholder:
            return self.bin_dir / toolchain.configuration_placeholder / filename
        if variant == "ide-configuration-deferred":
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"reason": "ide_variant_requires_placeholder", "toolchain": toolchain.name},
            )
        return self.bin_dir / filename
