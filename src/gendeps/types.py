from typing import Literal, Tuple, get_args, cast

# Strategy selecting artifact suffixes and the command sequence per toolchain.
PlatformVariant = Literal[
    "default",
    "msvc-archive",
    "ide-configuration-deferred",
    "bitcode-only",
]

VARIANTS: Tuple[PlatformVariant, ...] = cast(Tuple[PlatformVariant, ...], get_args(PlatformVariant))

# Kinds a host target can have; only "utility" targets are not linkable.
TargetKind = Literal["executable", "static_library", "shared_library", "utility"]

TARGET_KINDS: Tuple[TargetKind, ...] = cast(Tuple[TargetKind, ...], get_args(TargetKind))

LINKABLE_KINDS = frozenset({"executable", "static_library", "shared_library"})

__all__ = [
    "PlatformVariant",
    "VARIANTS",
    "TargetKind",
    "TARGET_KINDS",
    "LINKABLE_KINDS",
]
