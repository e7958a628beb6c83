"""Generator argument vectors and per-variant command sequences."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .artifacts import ArtifactSet
from .graph.model import Command
from .layout.paths import Paths
from .models import GeneratorRequest
from .toolchains import Toolchain
from .types import PlatformVariant
from .utils.errors import GDError, Err


@dataclass(frozen=True)
class InvocationPlan:
    variant: PlatformVariant
    executable: Path
    args: tuple[str, ...]
    commands: tuple[Command, ...]
    working_dir: Path


def generator_args(request: GeneratorRequest, scratch_dir: Path) -> tuple[str, ...]:
    """``-g <name> -f <ns><function> -o <dir>`` followed by the extra args in order.

    Later extra args may override earlier ones in the generator's own parsing,
    so they are never reordered or deduplicated.
    """

    return (
        "-g",
        request.generator_name,
        "-f",
        request.qualified_function,
        "-o",
        str(scratch_dir),
        *request.generator_args,
    )


def plan_commands(
    request: GeneratorRequest,
    scratch_dir: Path,
    artifacts: ArtifactSet,
    variant: PlatformVariant,
    toolchain: Toolchain,
    paths: Paths,
) -> tuple[Command, ...]:
    executable = paths.generator_executable(request.generator_target, toolchain, variant)
    run_generator = Command(
        argv=(str(executable), *generator_args(request, scratch_dir)),
        description=f"Running generator {request.generator_name} for {request.qualified_function}",
    )

    if variant in ("default", "ide-configuration-deferred", "bitcode-only"):
        return (run_generator,)

    if variant == "msvc-archive":
        if artifacts.intermediate is None or not toolchain.archiver:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"reason": "archive_variant_incomplete", "toolchain": toolchain.name},
            )
        archive = Command(
            argv=(toolchain.archiver, f"/OUT:{artifacts.library}", str(artifacts.intermediate)),
            description=f"Archiving {artifacts.intermediate.name} into {artifacts.library.name}",
        )
        return (run_generator, archive)

    raise GDError(Err.INVALID_CONFIG, ctx={"reason": "unknown_variant", "variant": variant})


def plan_invocation(
    request: GeneratorRequest,
    scratch_dir: Path,
    artifacts: ArtifactSet,
    variant: PlatformVariant,
    toolchain: Toolchain,
    paths: Paths,
) -> InvocationPlan:
    commands = plan_commands(request, scratch_dir, artifacts, variant, toolchain, paths)
    return InvocationPlan(
        variant=variant,
        executable=paths.generator_executable(request.generator_target, toolchain, variant),
        args=generator_args(request, scratch_dir),
        commands=commands,
        working_dir=scratch_dir,
    )
