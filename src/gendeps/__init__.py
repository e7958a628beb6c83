"""Wire external code-generator executables into a build graph."""

from .artifacts import ArtifactSet, artifact_set
from .graph import BuildGraph, InMemoryBuildGraph
from .layout import Paths, ScratchRegistry, generator_output_path
from .models import GeneratorDependency, GeneratorRequest
from .planner import generator_args, plan_commands, plan_invocation
from .toolchains import MSVC, UNIX, VISUAL_STUDIO, XCODE, Toolchain, host_toolchain, toolchain_for_name
from .utils.errors import Err, GDError
from .variants import select_variant
from .wiring import (
    AggregateConsumer,
    GeneratorWiring,
    LinkableConsumer,
    add_generator_dependency,
    resolve_consumer,
)

__all__ = [
    "AggregateConsumer",
    "ArtifactSet",
    "BuildGraph",
    "Err",
    "GDError",
    "GeneratorDependency",
    "GeneratorRequest",
    "GeneratorWiring",
    "InMemoryBuildGraph",
    "LinkableConsumer",
    "MSVC",
    "Paths",
    "ScratchRegistry",
    "Toolchain",
    "UNIX",
    "VISUAL_STUDIO",
    "XCODE",
    "add_generator_dependency",
    "artifact_set",
    "generator_args",
    "generator_output_path",
    "host_toolchain",
    "plan_commands",
    "plan_invocation",
    "resolve_consumer",
    "select_variant",
    "toolchain_for_name",
]
