"""In-memory build graph that records declarations.

Used as the canonical description of a build: tests assert on it directly,
the CLI serializes it, and the dagster translation executes it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, Sequence

from ..types import TARGET_KINDS, TargetKind
from ..utils.errors import GDError, Err
from .model import CustomCommand, Target

logger = logging.getLogger(__name__)

INCLUDE_SCOPES = ("PRIVATE", "PUBLIC", "INTERFACE")


class InMemoryBuildGraph:
    def __init__(self) -> None:
        self.targets: dict[str, Target] = {}
        self.commands: dict[str, CustomCommand] = {}

    # --- declarations ---
    def declare_target(
        self,
        name: str,
        kind: TargetKind,
        *,
        depends: Sequence[str] = (),
        folder: str | None = None,
    ) -> Target:
        if kind not in TARGET_KINDS:
            raise GDError(Err.INVALID_GRAPH, ctx={"target": name, "kind": kind, "known": list(TARGET_KINDS)})
        self._ensure_new_name(name)
        target = Target(name=name, kind=kind, depends=list(dict.fromkeys(depends)), folder=folder)
        self.targets[name] = target
        logger.debug("declared %s target %s", kind, name)
        return target

    def add_custom_command(self, node: CustomCommand) -> None:
        self._ensure_new_name(node.node_id)
        if not node.outputs:
            raise GDError(Err.INVALID_GRAPH, ctx={"node": node.node_id, "reason": "no_declared_outputs"})
        if not node.commands:
            raise GDError(Err.INVALID_GRAPH, ctx={"node": node.node_id, "reason": "no_commands"})
        claimed = self._claimed_outputs()
        for output in node.outputs:
            owner = claimed.get(Path(output))
            if owner is not None:
                raise GDError(
                    Err.INVALID_GRAPH,
                    ctx={"node": node.node_id, "output": str(output), "owner": owner},
                )
        self.commands[node.node_id] = node

    def add_aggregate(self, name: str, depends: Sequence[str], *, folder: str | None = None) -> None:
        self.declare_target(name, "utility", depends=depends, folder=folder)

    def add_dependency(self, target: str, dependency: str) -> None:
        node = self._require_target(target)
        if not self.has_node(dependency):
            raise GDError(Err.UNKNOWN_TARGET, ctx={"target": dependency, "reason": "dependency_not_declared"})
        if dependency == target:
            raise GDError(Err.INVALID_GRAPH, ctx={"target": target, "reason": "self_dependency"})
        if dependency not in node.depends:
            node.depends.append(dependency)

    def add_link_library(self, target: str, library: Path) -> None:
        node = self._require_target(target)
        if not node.linkable:
            raise GDError(
                Err.INVALID_GRAPH,
                ctx={"target": target, "kind": node.kind, "reason": "link_input_on_non_linkable_target"},
            )
        library = Path(library)
        if library not in node.link_libraries:
            node.link_libraries.append(library)

    def add_include_directory(self, target: str, directory: Path, *, scope: str = "PRIVATE") -> None:
        node = self._require_target(target)
        if scope not in INCLUDE_SCOPES:
            raise GDError(Err.INVALID_GRAPH, ctx={"target": target, "scope": scope})
        if not node.linkable:
            raise GDError(
                Err.INVALID_GRAPH,
                ctx={"target": target, "kind": node.kind, "reason": "include_dir_on_non_linkable_target"},
            )
        entry = (scope, Path(directory))
        if entry not in node.include_dirs:
            node.include_dirs.append(entry)

    # --- queries ---
    def target_kind(self, name: str) -> TargetKind | None:
        target = self.targets.get(name)
        return target.kind if target is not None else None

    def has_node(self, name: str) -> bool:
        return name in self.targets or name in self.commands

    def dependencies_of(self, name: str) -> tuple[str, ...]:
        if name in self.commands:
            return self.commands[name].depends
        if name in self.targets:
            return tuple(self.targets[name].depends)
        raise GDError(Err.UNKNOWN_TARGET, ctx={"target": name})

    def topological_order(self) -> list[str]:
        """All node names, dependencies first; raises on missing nodes or cycles."""

        order: list[str] = []
        state: dict[str, str] = {}

        def visit(name: str, trail: tuple[str, ...]) -> None:
            mark = state.get(name)
            if mark == "done":
                return
            if mark == "active":
                raise GDError(Err.INVALID_GRAPH, ctx={"reason": "cycle", "path": [*trail, name]})
            if not self.has_node(name):
                raise GDError(
                    Err.UNKNOWN_TARGET,
                    ctx={"target": name, "required_by": trail[-1] if trail else None},
                )
            state[name] = "active"
            for dep in self.dependencies_of(name):
                visit(dep, (*trail, name))
            state[name] = "done"
            order.append(name)

        for name in sorted(self.nodes()):
            visit(name, ())
        return order

    def validate(self) -> None:
        self.topological_order()

    def nodes(self) -> Iterator[str]:
        yield from self.targets
        yield from self.commands

    def to_dict(self) -> dict[str, Any]:
        return {
            "targets": {
                name: {
                    "kind": t.kind,
                    "depends": list(t.depends),
                    "link_libraries": [str(p) for p in t.link_libraries],
                    "include_dirs": [{"scope": s, "path": str(p)} for s, p in t.include_dirs],
                    "folder": t.folder,
                }
                for name, t in sorted(self.targets.items())
            },
            "commands": {
                node_id: {
                    "outputs": [str(p) for p in c.outputs],
                    "depends": list(c.depends),
                    "inputs": [str(p) for p in c.inputs],
                    "working_dir": str(c.working_dir),
                    "commands": [list(cmd.argv) for cmd in c.commands],
                    "comment": c.comment,
                }
                for node_id, c in sorted(self.commands.items())
            },
        }

    # --- helpers ---
    def _require_target(self, name: str) -> Target:
        target = self.targets.get(name)
        if target is None:
            raise GDError(Err.UNKNOWN_TARGET, ctx={"target": name})
        return target

    def _ensure_new_name(self, name: str) -> None:
        if not name or not str(name).strip():
            raise GDError(Err.INVALID_GRAPH, ctx={"reason": "empty_node_name"})
        if self.has_node(name):
            raise GDError(Err.INVALID_GRAPH, ctx={"reason": "duplicate_node", "node": name})

    def _claimed_outputs(self) -> dict[Path, str]:
        return {Path(out): node_id for node_id, c in self.commands.items() for out in c.outputs}
