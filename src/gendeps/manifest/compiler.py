"""Apply a manifest to a fresh in-memory build graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..graph.memory import InMemoryBuildGraph
from ..layout.paths import Paths
from ..layout.scratch import ScratchRegistry
from ..models import GeneratorDependency
from ..toolchains import Toolchain, host_toolchain, toolchain_for_name
from ..wiring import GeneratorWiring
from .models import BuildManifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledBuild:
    graph: InMemoryBuildGraph
    paths: Paths
    toolchain: Toolchain
    registry: ScratchRegistry
    dependencies: tuple[GeneratorDependency, ...]


def compile_manifest(manifest: BuildManifest, *, toolchain: str | None = None) -> CompiledBuild:
    """Declare the manifest's targets, then every generator request, in order.

    ``toolchain`` overrides the manifest's own choice; with neither set the
    running platform decides.
    """

    name = toolchain or manifest.toolchain
    preset = toolchain_for_name(name) if name else host_toolchain()
    paths = Paths(manifest.build_root)
    graph = InMemoryBuildGraph()

    for decl in manifest.targets:
        graph.declare_target(decl.name, decl.kind)
    for decl in manifest.targets:
        for dep in decl.depends:
            graph.add_dependency(decl.name, dep)

    registry = ScratchRegistry(paths)
    wiring = GeneratorWiring(graph, paths=paths, toolchain=preset, registry=registry)
    dependencies = tuple(wiring.add(request) for request in manifest.generators)

    registry.validate()
    graph.validate()
    logger.info(
        "compiled %d generator request(s) for toolchain %s into %s",
        len(dependencies),
        preset.name,
        paths.build_root,
    )
    return CompiledBuild(
        graph=graph,
        paths=paths,
        toolchain=preset,
        registry=registry,
        dependencies=dependencies,
    )
