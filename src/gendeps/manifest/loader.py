"""Manifest loader for generator build descriptions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..models import GeneratorRequest
from ..types import TARGET_KINDS
from ..utils.errors import GDError, Err
from .models import BuildManifest, TargetDecl

_REQUEST_FIELDS = {
    "generator_target",
    "generator_name",
    "function_name",
    "function_namespace",
    "generator_args",
    "target_suffix",
    "consumer",
    "variant",
}


def _load_mapping(data: Any, *, path: Path) -> Mapping[str, Any]:
    if isinstance(data, Mapping):
        return data
    raise GDError(
        Err.INVALID_CONFIG,
        ctx={"path": str(path), "error": "top-level must be mapping"},
    )


def _parse_file(path: Path) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GDError(Err.IO_ERROR, ctx={"path": str(path), "error": "unreadable manifest"}, cause=exc)
    if suffix in {".yaml", ".yml"}:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise GDError(Err.INVALID_CONFIG, ctx={"path": str(path), "error": "invalid YAML"}, cause=exc)
        return _load_mapping(data or {}, path=path)
    if suffix == ".json":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise GDError(Err.INVALID_CONFIG, ctx={"path": str(path), "error": "invalid JSON"}, cause=exc)
        return _load_mapping(data, path=path)
    raise GDError(
        Err.INVALID_CONFIG,
        ctx={"path": str(path), "error": "unsupported manifest extension"},
    )


def load_manifest(path: Path | str) -> BuildManifest:
    """Load a manifest file into a :class:`BuildManifest`."""

    manifest_path = Path(path)
    data = _parse_file(manifest_path)
    return parse_manifest_mapping(data, source=manifest_path, base_dir=manifest_path.parent)


def parse_manifest_mapping(
    data: Mapping[str, Any],
    *,
    source: Path | None = None,
    base_dir: Path | None = None,
) -> BuildManifest:
    where = str(source) if source else "<mapping>"

    build_root_raw = data.get("build_root")
    if not isinstance(build_root_raw, str) or not build_root_raw.strip():
        raise GDError(
            Err.INVALID_CONFIG,
            ctx={"path": where, "error": "build_root required"},
        )
    build_root = Path(build_root_raw)
    if not build_root.is_absolute() and base_dir is not None:
        build_root = base_dir / build_root

    toolchain = data.get("toolchain")
    if toolchain is not None and not isinstance(toolchain, str):
        raise GDError(
            Err.INVALID_CONFIG,
            ctx={"path": where, "error": "toolchain must be string"},
        )

    targets = _parse_targets(data.get("targets", {}), where=where)
    generators = _parse_generators(data.get("generators", []), where=where)

    return BuildManifest(
        build_root=build_root,
        toolchain=toolchain,
        targets=tuple(targets),
        generators=tuple(generators),
        source=source,
    )


def _parse_targets(section: Any, *, where: str) -> list[TargetDecl]:
    if section in (None, {}):
        return []
    if not isinstance(section, Mapping):
        raise GDError(
            Err.INVALID_CONFIG,
            ctx={"path": where, "error": "targets must be mapping"},
        )

    targets: list[TargetDecl] = []
    for name, payload in section.items():
        if not isinstance(name, str) or not name:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"path": where, "error": "target name must be non-empty string"},
            )
        if isinstance(payload, str):
            kind, depends = payload, []
        elif isinstance(payload, Mapping):
            kind = payload.get("kind")
            depends = payload.get("depends", [])
        else:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"path": where, "target": name, "error": "target must be kind string or mapping"},
            )

        if kind not in TARGET_KINDS:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"path": where, "target": name, "error": "unknown target kind", "kind": kind},
            )
        if not isinstance(depends, list) or not all(isinstance(d, str) for d in depends):
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"path": where, "target": name, "error": "target depends must be list of strings"},
            )
        targets.append(TargetDecl(name=name, kind=kind, depends=tuple(depends)))
    return targets


def _parse_generators(section: Any, *, where: str) -> list[GeneratorRequest]:
    if section in (None, []):
        return []
    if not isinstance(section, list):
        raise GDError(
            Err.INVALID_CONFIG,
            ctx={"path": where, "error": "generators must be list"},
        )

    requests: list[GeneratorRequest] = []
    for index, payload in enumerate(section):
        if not isinstance(payload, Mapping):
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"path": where, "generator": index, "error": "generator entry must be mapping"},
            )
        unknown = sorted(set(payload) - _REQUEST_FIELDS)
        if unknown:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"path": where, "generator": index, "error": "unknown generator fields", "fields": unknown},
            )
        try:
            requests.append(GeneratorRequest.from_mapping(payload))
        except GDError as exc:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={"path": where, "generator": index, **(exc.ctx or {})},
                cause=exc,
            )
    return requests
