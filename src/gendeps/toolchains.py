"""Toolchain presets describing how a generated object becomes a linkable artifact.

Each preset carries the platform file suffixes, the archiver used to pack an
intermediate object (when the toolchain needs one) and the placeholder an IDE
substitutes for the active build configuration.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass
from typing import Dict

from .types import PlatformVariant, VARIANTS
from .utils.errors import GDError, Err


@dataclass(frozen=True)
class Toolchain:
    name: str
    host_variant: PlatformVariant
    static_lib_suffix: str = ".a"
    object_suffix: str = ".o"
    executable_suffix: str = ""
    archiver: str | None = None
    configuration_placeholder: str | None = None

    def __post_init__(self) -> None:
        if self.host_variant not in VARIANTS:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"toolchain": self.name, "reason": "unknown_variant", "variant": self.host_variant},
            )
        if self.host_variant == "msvc-archive" and not self.archiver:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"toolchain": self.name, "reason": "archive_variant_requires_archiver"},
            )
        if self.host_variant == "ide-configuration-deferred" and not self.configuration_placeholder:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"toolchain": self.name, "reason": "ide_variant_requires_placeholder"},
            )


UNIX = Toolchain(name="unix", host_variant="default")

MSVC = Toolchain(
    name="msvc",
    host_variant="msvc-archive",
    static_lib_suffix=".lib",
    object_suffix=".obj",
    executable_suffix=".exe",
    archiver="lib.exe",
)

# Multi-configuration Visual Studio builds: same artifacts as msvc, but the
# generator lands in bin/<configuration>/.
VISUAL_STUDIO = Toolchain(
    name="vs",
    host_variant="msvc-archive",
    static_lib_suffix=".lib",
    object_suffix=".obj",
    executable_suffix=".exe",
    archiver="lib.exe",
    configuration_placeholder="$(Configuration)",
)

XCODE = Toolchain(
    name="xcode",
    host_variant="ide-configuration-deferred",
    configuration_placeholder="$(CONFIGURATION)",
)

TOOLCHAINS: Dict[str, Toolchain] = {tc.name: tc for tc in (UNIX, MSVC, VISUAL_STUDIO, XCODE)}


def toolchain_for_name(name: str) -> Toolchain:
    key = str(name or "").strip().lower()
    try:
        return TOOLCHAINS[key]
    except KeyError as exc:
        raise GDError(
            Err.INVALID_CONFIG,
            ctx={"toolchain": name, "known": sorted(TOOLCHAINS)},
        ) from exc


def host_toolchain() -> Toolchain:
    """Pick the preset matching the running platform.

    Windows maps to MSVC; everything else to the single-configuration unix
    preset. Xcode is never implied and must be requested by name.
    """

    if platform.system() == "Windows":
        return MSVC
    return UNIX


__all__ = ["Toolchain", "UNIX", "MSVC", "VISUAL_STUDIO", "XCODE", "TOOLCHAINS", "toolchain_for_name", "host_toolchain"]
