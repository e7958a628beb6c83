"""Platform-variant selection for a generator request.

The structured ``GeneratorRequest.variant`` field is authoritative. Requests
that leave it unset fall back to scanning the extra generator arguments for
the bitcode backend marker, which older build descriptions rely on. Only a
marker that is a whole component of a ``target=`` value counts; anything else
containing the marker is rejected as ambiguous instead of guessed at.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .models import GeneratorRequest
from .toolchains import Toolchain
from .types import PlatformVariant
from .utils.errors import GDError, Err

logger = logging.getLogger(__name__)

BITCODE_MARKER = "pnacl"
TARGET_ARG_PREFIX = "target="


@dataclass
class MarkerScan:
    bitcode_targets: int = 0
    native_targets: int = 0
    stray: list[str] = field(default_factory=list)


def scan_bitcode_marker(args: Sequence[str]) -> MarkerScan:
    scan = MarkerScan()
    if BITCODE_MARKER not in ";".join(args):
        return scan

    for arg in args:
        if arg.startswith(TARGET_ARG_PREFIX):
            targets = [t for t in arg[len(TARGET_ARG_PREFIX):].split(",") if t]
            for target in targets:
                components = target.split("-")
                if BITCODE_MARKER in components:
                    scan.bitcode_targets += 1
                    continue
                scan.native_targets += 1
                if BITCODE_MARKER in target:
                    scan.stray.append(arg)
        elif BITCODE_MARKER in arg:
            scan.stray.append(arg)
    return scan


def legacy_bitcode_marker(args: Sequence[str]) -> bool:
    """Return True when the args request a bitcode-only target.

    Raises ``AMBIGUOUS_VARIANT`` when the marker text appears but cannot be
    read as a target component, or when a multi-target list mixes bitcode and
    native targets.
    """

    scan = scan_bitcode_marker(args)
    if scan.stray:
        raise GDError(
            Err.AMBIGUOUS_VARIANT,
            ctx={"reason": "marker_outside_target_component", "args": scan.stray},
        )
    if scan.bitcode_targets and scan.native_targets:
        raise GDError(
            Err.AMBIGUOUS_VARIANT,
            ctx={"reason": "mixed_bitcode_and_native_targets", "args": list(args)},
        )
    return scan.bitcode_targets > 0


def _check_supported(variant: PlatformVariant, toolchain: Toolchain) -> None:
    if variant == "msvc-archive" and not toolchain.archiver:
        raise GDError(
            Err.INVALID_CONFIG,
            ctx={"reason": "toolchain_has_no_archiver", "toolchain": toolchain.name, "variant": variant},
        )
    if variant == "ide-configuration-deferred" and not toolchain.configuration_placeholder:
        raise GDError(
            Err.INVALID_CONFIG,
            ctx={"reason": "toolchain_has_no_configuration_placeholder", "toolchain": toolchain.name},
        )


def select_variant(request: GeneratorRequest, toolchain: Toolchain) -> PlatformVariant:
    """Variant for ``request`` on ``toolchain``; bitcode wins over the host variant."""

    if request.variant is not None:
        scan = scan_bitcode_marker(request.generator_args)
        if request.variant != "bitcode-only" and scan.bitcode_targets:
            raise GDError(
                Err.AMBIGUOUS_VARIANT,
                ctx={
                    "reason": "explicit_variant_contradicts_bitcode_target",
                    "variant": request.variant,
                    "generator": request.unique_name,
                },
            )
        _check_supported(request.variant, toolchain)
        return request.variant

    if legacy_bitcode_marker(request.generator_args):
        logger.debug("bitcode target detected in args for %s", request.unique_name)
        return "bitcode-only"
    return toolchain.host_variant
