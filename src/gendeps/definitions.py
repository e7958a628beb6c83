"""Dagster code location for the manifest named by ``GENDEPS_MANIFEST``.

Run ``GENDEPS_MANIFEST=path/to/build.yaml dagster dev -m gendeps.definitions``.
"""

import os

from gendeps.execution.assets import build_definitions
from gendeps.manifest import compile_manifest, load_manifest
from gendeps.resources import GeneratorBuildConfig
from gendeps.utils.errors import GDError, Err


def _load_definitions():
    manifest_path = os.environ.get("GENDEPS_MANIFEST")
    if not manifest_path:
        raise GDError(Err.INVALID_CONFIG, ctx={"reason": "GENDEPS_MANIFEST not set"})
    build = compile_manifest(load_manifest(manifest_path), toolchain=os.environ.get("GENDEPS_TOOLCHAIN"))
    config = GeneratorBuildConfig(
        build_root=str(build.paths.build_root),
        toolchain=build.toolchain.name,
        configuration=os.environ.get("GENDEPS_CONFIGURATION"),
        force=os.environ.get("GENDEPS_FORCE") == "1",
    )
    return build_definitions(build.graph, config)


defs = _load_definitions()
