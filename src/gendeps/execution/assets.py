"""Translate a recorded build graph into dagster assets.

Dagster acts as the host scheduler: custom-command nodes become assets that
run their command sequence, aggregate/utility targets become no-op assets
that only carry dependency edges, and every other declared target becomes an
external ``AssetSpec`` so lineage (link inputs, include dirs) stays visible.
"""

from __future__ import annotations

import os
import re
from typing import Any, Iterable

import dagster as dg

from ..graph.memory import InMemoryBuildGraph
from ..graph.model import CustomCommand, Target
from ..resources.build_config import GeneratorBuildConfig
from ..utils.errors import GDError, Err
from ._error_boundary import with_node_error_boundary
from .runner import run_custom_command

RESOURCE_KEY = "gendeps_build"
COMMAND_GROUP = "generator_commands"
TARGET_GROUP = "build_targets"

_ASSET_NAME_RE = re.compile(r"[^A-Za-z0-9_]")


def asset_name(node: str) -> str:
    return _ASSET_NAME_RE.sub("_", node)


def _asset_keys(graph: InMemoryBuildGraph) -> dict[str, dg.AssetKey]:
    keys: dict[str, dg.AssetKey] = {}
    seen: dict[str, str] = {}
    for node in graph.nodes():
        name = asset_name(node)
        if name in seen:
            raise GDError(
                Err.INVALID_GRAPH,
                ctx={"reason": "asset_name_collision", "nodes": [seen[name], node], "asset": name},
            )
        seen[name] = node
        keys[node] = dg.AssetKey(name)
    return keys


def _command_asset(node: CustomCommand, keys: dict[str, dg.AssetKey]) -> dg.AssetsDefinition:
    @dg.asset(
        name=keys[node.node_id].path[-1],
        group_name=COMMAND_GROUP,
        deps=[keys[d] for d in node.depends],
        required_resource_keys={RESOURCE_KEY},
        description=node.comment or None,
    )
    @with_node_error_boundary(node.node_id)
    def _run(context):
        config: GeneratorBuildConfig = getattr(context.resources, RESOURCE_KEY)
        toolchain = config.toolchain_preset()
        result = run_custom_command(
            node,
            placeholder=toolchain.configuration_placeholder,
            configuration=config.configuration,
            force=config.force,
            log=dg.get_dagster_logger(),
        )
        return dg.MaterializeResult(
            metadata={
                "outputs": dg.MetadataValue.json([str(p) for p in result.outputs]),
                "skipped": result.skipped,
                "commands_run": result.commands_run,
                "working_dir": dg.MetadataValue.path(str(node.working_dir)),
            }
        )

    return _run


def _aggregate_asset(target: Target, keys: dict[str, dg.AssetKey]) -> dg.AssetsDefinition:
    @dg.asset(
        name=keys[target.name].path[-1],
        group_name=asset_name(target.folder) if target.folder else TARGET_GROUP,
        deps=[keys[d] for d in target.depends],
    )
    def _aggregate():
        return dg.MaterializeResult(metadata={"depends": dg.MetadataValue.json(list(target.depends))})

    return _aggregate


def _target_spec(target: Target, keys: dict[str, dg.AssetKey]) -> dg.AssetSpec:
    metadata: dict[str, Any] = {"kind": target.kind}
    if target.link_libraries:
        metadata["link_libraries"] = dg.MetadataValue.json([str(p) for p in target.link_libraries])
    if target.include_dirs:
        metadata["include_dirs"] = dg.MetadataValue.json(
            [{"scope": scope, "path": str(path)} for scope, path in target.include_dirs]
        )
    return dg.AssetSpec(
        key=keys[target.name],
        deps=[keys[d] for d in target.depends],
        group_name=asset_name(target.folder) if target.folder else TARGET_GROUP,
        metadata=metadata,
    )


def build_assets(graph: InMemoryBuildGraph) -> tuple[list[dg.AssetsDefinition], list[dg.AssetSpec]]:
    """Return ``(executable_assets, external_specs)`` for a validated graph."""

    graph.validate()
    keys = _asset_keys(graph)
    executable: list[dg.AssetsDefinition] = []
    external: list[dg.AssetSpec] = []
    for node in graph.topological_order():
        if node in graph.commands:
            executable.append(_command_asset(graph.commands[node], keys))
            continue
        target = graph.targets[node]
        if target.kind == "utility":
            executable.append(_aggregate_asset(target, keys))
        else:
            external.append(_target_spec(target, keys))
    return executable, external


# Use in-process executor when GENDEPS_IN_PROCESS=1 (helpful for CI/restricted envs).
def _executor():
    if os.environ.get("GENDEPS_IN_PROCESS") == "1":
        return dg.in_process_executor
    return dg.multiprocess_executor.configured({"max_concurrent": os.cpu_count() or 4})


def build_definitions(graph: InMemoryBuildGraph, config: GeneratorBuildConfig) -> dg.Definitions:
    executable, external = build_assets(graph)
    return dg.Definitions(
        assets=[*executable, *external],
        resources={RESOURCE_KEY: config},
        executor=_executor(),
    )


def materialize_graph(
    graph: InMemoryBuildGraph,
    config: GeneratorBuildConfig,
    *,
    selection: Iterable[str] | None = None,
    instance: dg.DagsterInstance | None = None,
    raise_on_error: bool = True,
) -> dg.ExecuteInProcessResult:
    """Run every generator and aggregate node (or only ``selection``) in process."""

    executable, _ = build_assets(graph)
    kwargs: dict[str, Any] = {
        "resources": {RESOURCE_KEY: config},
        "instance": instance,
        "raise_on_error": raise_on_error,
    }
    if selection is not None:
        kwargs["selection"] = [asset_name(name) for name in selection]
    return dg.materialize(executable, **kwargs)
