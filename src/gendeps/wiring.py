"""Declare a generator invocation in the build graph and attach it to a consumer.

One call produces two nodes:

* a custom command ``gen_<unique>_<function>`` that depends on the generator
  executable target, runs the planned commands inside the scratch dir and
  declares the full artifact set as outputs;
* an aggregate ``exec_generator_<unique>_<function>`` that depends on the
  command node, so any number of consumers can wait on the generation step
  without re-declaring the command.

Consumers are resolved once into ``LinkableConsumer`` or ``AggregateConsumer``.
Both get a build-order edge to the aggregate; only linkable consumers get the
library as a link input and the scratch dir as a private include path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .artifacts import artifact_set
from .graph.host import BuildGraph
from .graph.model import CustomCommand
from .layout.paths import Paths
from .layout.scratch import ScratchRegistry
from .models import GeneratorDependency, GeneratorRequest
from .planner import InvocationPlan, plan_invocation
from .toolchains import Toolchain
from .types import LINKABLE_KINDS
from .utils.errors import GDError, Err
from .variants import select_variant

logger = logging.getLogger(__name__)

GENERATOR_FOLDER = "generator"
EXEC_TARGET_PREFIX = "exec_generator_"
COMMAND_NODE_PREFIX = "gen_"


@dataclass(frozen=True)
class LinkableConsumer:
    name: str


@dataclass(frozen=True)
class AggregateConsumer:
    name: str


Consumer = Union[LinkableConsumer, AggregateConsumer]


def resolve_consumer(graph: BuildGraph, name: str) -> Consumer:
    kind = graph.target_kind(name)
    if kind is None:
        raise GDError(Err.UNKNOWN_TARGET, ctx={"target": name, "reason": "consumer_not_declared"})
    if kind in LINKABLE_KINDS:
        return LinkableConsumer(name)
    return AggregateConsumer(name)


def exec_target_name(request: GeneratorRequest) -> str:
    return f"{EXEC_TARGET_PREFIX}{request.unique_name}_{request.function_name}"


def command_node_id(request: GeneratorRequest) -> str:
    return f"{COMMAND_NODE_PREFIX}{request.unique_name}_{request.function_name}"


class GeneratorWiring:
    """Declares generator dependencies into one build graph.

    Holds the scratch registry so repeated declarations across a build
    converge on the same scratch dirs and nodes.
    """

    def __init__(
        self,
        graph: BuildGraph,
        *,
        paths: Paths,
        toolchain: Toolchain,
        registry: ScratchRegistry | None = None,
    ) -> None:
        self.graph = graph
        self.paths = paths
        self.toolchain = toolchain
        self.registry = registry if registry is not None else ScratchRegistry(paths)
        self._declared: dict[tuple[str, str, str], GeneratorDependency] = {}

    def add(self, request: GeneratorRequest) -> GeneratorDependency:
        claim, created = self.registry.claim(
            request.generator_name,
            request.target_suffix,
            request.function_name,
            request.fingerprint(),
        )
        slot = (claim.generator_name, claim.target_suffix, claim.function_name)

        if created:
            try:
                dependency = self._declare(request, claim.scratch_dir)
            except Exception:
                self.registry.release(claim)
                raise
            self._declared[slot] = dependency
        else:
            dependency = self._declared.get(slot)
            if dependency is None:
                # Declared through another wiring sharing this registry.
                dependency, _ = self._describe(request, claim.scratch_dir)
                if self.graph.target_kind(dependency.target) is None:
                    raise GDError(
                        Err.INVALID_GRAPH,
                        ctx={
                            "reason": "claimed_step_not_in_graph",
                            "target": dependency.target,
                            "node": dependency.node_id,
                        },
                    )
                self._declared[slot] = dependency
            logger.warning(
                "generator step %s already declared; reusing it for consumer %s",
                dependency.target,
                request.consumer,
            )

        if request.consumer is not None:
            self.attach(dependency, request.consumer)
        return dependency

    def attach(self, dependency: GeneratorDependency, consumer_name: str) -> Consumer:
        consumer = resolve_consumer(self.graph, consumer_name)
        self.graph.add_dependency(consumer.name, dependency.target)
        if isinstance(consumer, LinkableConsumer):
            self.graph.add_link_library(consumer.name, dependency.library)
            self.graph.add_include_directory(consumer.name, dependency.scratch_dir, scope="PRIVATE")
        else:
            logger.debug("consumer %s is an aggregate; skipping link and include wiring", consumer.name)
        return consumer

    def _describe(self, request: GeneratorRequest, scratch_dir: Path) -> tuple[GeneratorDependency, InvocationPlan]:
        variant = select_variant(request, self.toolchain)
        artifacts = artifact_set(scratch_dir, request.function_name, variant, self.toolchain)
        plan = plan_invocation(request, scratch_dir, artifacts, variant, self.toolchain, self.paths)
        dependency = GeneratorDependency(
            request=request,
            variant=variant,
            scratch_dir=scratch_dir,
            artifacts=artifacts,
            node_id=command_node_id(request),
            target=exec_target_name(request),
        )
        return dependency, plan

    def _declare(self, request: GeneratorRequest, scratch_dir: Path) -> GeneratorDependency:
        dependency, plan = self._describe(request, scratch_dir)
        if self.graph.target_kind(dependency.target) is not None:
            raise GDError(Err.INVALID_GRAPH, ctx={"reason": "duplicate_node", "node": dependency.target})
        self.graph.add_custom_command(
            CustomCommand(
                node_id=dependency.node_id,
                outputs=dependency.artifacts.outputs,
                depends=(request.generator_target,),
                commands=plan.commands,
                working_dir=plan.working_dir,
                inputs=(plan.executable,),
                comment=f"Generating {request.qualified_function} with {request.generator_name}",
            )
        )
        self.graph.add_aggregate(dependency.target, (dependency.node_id,), folder=GENERATOR_FOLDER)
        logger.debug(
            "declared %s (%s) -> %s",
            dependency.target,
            dependency.variant,
            ", ".join(dependency.artifacts.filenames),
        )
        return dependency


def add_generator_dependency(
    request: GeneratorRequest,
    graph: BuildGraph,
    *,
    paths: Paths,
    toolchain: Toolchain,
    registry: ScratchRegistry | None = None,
) -> GeneratorDependency:
    """Single-request convenience wrapper around :class:`GeneratorWiring`.

    Pass a shared ``registry`` when declaring several requests into the same
    graph so scratch-dir collisions are detected across calls.
    """

    wiring = GeneratorWiring(graph, paths=paths, toolchain=toolchain, registry=registry)
    return wiring.add(request)
