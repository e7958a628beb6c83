"""Command-line entry point for planning and running generator manifests."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from gendeps.manifest import compile_manifest, load_manifest
from gendeps.utils.errors import GDError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gendeps", description="Wire code generators into a build graph")
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    plan = sub.add_parser("plan", help="Print the declared build graph as JSON")
    plan.add_argument("manifest", help="Path to manifest (yaml or json)")
    plan.add_argument("--toolchain", help="Override the manifest toolchain (unix, msvc, vs, xcode)")
    plan.add_argument("--out", help="Optional output path for the JSON graph")

    run = sub.add_parser("run", help="Run generator nodes through dagster")
    run.add_argument("manifest", help="Path to manifest (yaml or json)")
    run.add_argument("--toolchain", help="Override the manifest toolchain (unix, msvc, vs, xcode)")
    run.add_argument("--configuration", help="Build configuration substituted for IDE placeholders")
    run.add_argument("--force", action="store_true", help="Rerun generators even when outputs are fresh")
    run.add_argument(
        "--select",
        action="append",
        default=None,
        metavar="NODE",
        help="Only run the named node (may be repeated)",
    )
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    manifest = load_manifest(args.manifest)
    build = compile_manifest(manifest, toolchain=args.toolchain)

    if args.command == "plan":
        payload = json.dumps(build.graph.to_dict(), indent=2, sort_keys=True)
        if args.out:
            Path(args.out).write_text(payload + "\n", encoding="utf-8")
        else:
            print(payload)
        return 0

    # Imported lazily so planning does not pay for dagster's import time.
    from gendeps.execution.assets import materialize_graph
    from gendeps.resources import GeneratorBuildConfig

    config = GeneratorBuildConfig(
        build_root=str(build.paths.build_root),
        toolchain=build.toolchain.name,
        configuration=args.configuration,
        force=args.force,
    )
    result = materialize_graph(build.graph, config, selection=args.select, raise_on_error=False)
    return 0 if result.success else 1


def entrypoint() -> None:  # pragma: no cover - console entry
    try:
        raise SystemExit(main())
    except GDError as exc:  # pragma: no cover - console behavior
        raise SystemExit(f"error: {exc}")
