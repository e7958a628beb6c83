from pathlib import Path

import dagster as dg
import pytest

from gendeps.execution.assets import asset_name, build_assets, build_definitions
from gendeps.graph import InMemoryBuildGraph
from gendeps.layout.paths import Paths
from gendeps.models import GeneratorRequest
from gendeps.resources.build_config import GeneratorBuildConfig
from gendeps.toolchains import UNIX
from gendeps.utils.errors import Err, GDError
from gendeps.wiring import add_generator_dependency


@pytest.fixture()
def graph(tmp_path: Path) -> InMemoryBuildGraph:
    g = InMemoryBuildGraph()
    g.declare_target("blur_gen", "executable")
    g.declare_target("demo_app", "executable")
    add_generator_dependency(
        GeneratorRequest(
            generator_target="blur_gen",
            generator_name="Blur",
            function_name="blur",
            consumer="demo_app",
        ),
        g,
        paths=Paths(tmp_path),
        toolchain=UNIX,
    )
    return g


def test_asset_name_sanitizes() -> None:
    assert asset_name("exec_generator_Blur_blur") == "exec_generator_Blur_blur"
    assert asset_name("my-app.v2") == "my_app_v2"


def test_build_assets_splits_executable_and_external(graph) -> None:
    executable, external = build_assets(graph)
    executable_keys = {key.to_user_string() for a in executable for key in a.keys}
    external_keys = {spec.key.to_user_string() for spec in external}
    assert executable_keys == {"gen_Blur_blur", "exec_generator_Blur_blur"}
    assert external_keys == {"blur_gen", "demo_app"}


def test_external_spec_carries_link_metadata(graph, tmp_path: Path) -> None:
    _, external = build_assets(graph)
    app = next(spec for spec in external if spec.key == dg.AssetKey("demo_app"))
    assert {dep.asset_key for dep in app.deps} == {dg.AssetKey("exec_generator_Blur_blur")}
    assert app.metadata["link_libraries"].value == [str(tmp_path / "scratch_Blur" / "blur.a")]


def test_command_asset_depends_on_generator_target(graph) -> None:
    executable, _ = build_assets(graph)
    command = next(a for a in executable if a.key == dg.AssetKey("gen_Blur_blur"))
    assert set(command.dependency_keys) == {dg.AssetKey("blur_gen")}
    assert command.group_names_by_key[command.key] == "generator_commands"


def test_asset_name_collision_is_rejected() -> None:
    g = InMemoryBuildGraph()
    g.declare_target("a-b", "utility")
    g.declare_target("a_b", "utility")
    with pytest.raises(GDError) as exc:
        build_assets(g)
    assert exc.value.code is Err.INVALID_GRAPH


def test_definitions_resolve(graph, tmp_path: Path) -> None:
    config = GeneratorBuildConfig(build_root=str(tmp_path))
    defs = build_definitions(graph, config)
    dg.Definitions.validate_loadable(defs)
    assert defs.resources["gendeps_build"] is config
