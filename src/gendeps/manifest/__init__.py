"""Build manifests: declare targets and generator requests from YAML or JSON."""

from .compiler import CompiledBuild, compile_manifest
from .loader import load_manifest, parse_manifest_mapping
from .models import BuildManifest, TargetDecl

__all__ = [
    "BuildManifest",
    "CompiledBuild",
    "TargetDecl",
    "compile_manifest",
    "load_manifest",
    "parse_manifest_mapping",
]
