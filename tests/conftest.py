"""Shared fixtures for integration tests."""

import os
import stat
import sys
from pathlib import Path

import pytest
from dagster import DagsterInstance

from gendeps.graph import InMemoryBuildGraph
from gendeps.layout.paths import Paths


# Ensure DAGSTER_HOME points to a temp path for all tests
@pytest.fixture(scope="session", autouse=True)
def _dagster_home_env(tmp_path_factory):
    tmp_home = tmp_path_factory.mktemp("dagster_home")
    os.environ["DAGSTER_HOME"] = str(tmp_home)
    return str(tmp_home)


@pytest.fixture
def ephemeral_instance():
    """Provide a fresh Dagster instance for each test."""
    return DagsterInstance.ephemeral()


@pytest.fixture
def paths(tmp_path: Path) -> Paths:
    return Paths(tmp_path / "build")


@pytest.fixture
def host_graph() -> InMemoryBuildGraph:
    """A host graph with one generator executable, one app and one phony group."""
    graph = InMemoryBuildGraph()
    graph.declare_target("filters_gen", "executable")
    graph.declare_target("demo_app", "executable")
    graph.declare_target("all_filters", "utility")
    return graph


# Stand-in generator: parses -f/-o and writes <fn>.a and <fn>.h into the output dir.
_FAKE_GENERATOR = """#!/bin/sh
fn=""
out=""
while [ $# -gt 0 ]; do
  case "$1" in
    -f) fn="$2"; shift 2 ;;
    -o) out="$2"; shift 2 ;;
    *) shift ;;
  esac
done
fn="${fn##*::}"
echo "generated $fn" > "$out/$fn.a"
echo "// $fn" > "$out/$fn.h"
"""


@pytest.fixture
def fake_generator():
    """Factory writing an executable shell generator at ``bin/<target>``."""
    if sys.platform.startswith("win"):
        pytest.skip("fake generator is a POSIX shell script")

    def _make(paths: Paths, target: str, body: str = _FAKE_GENERATOR) -> Path:
        exe = paths.bin_dir / target
        exe.parent.mkdir(parents=True, exist_ok=True)
        exe.write_text(body, encoding="utf-8")
        exe.chmod(exe.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return exe

    return _make
