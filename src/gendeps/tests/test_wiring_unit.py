from pathlib import Path

import pytest

from gendeps.graph import InMemoryBuildGraph
from gendeps.layout.paths import Paths
from gendeps.layout.scratch import ScratchRegistry
from gendeps.models import GeneratorRequest
from gendeps.toolchains import MSVC, UNIX
from gendeps.utils.errors import Err, GDError
from gendeps.wiring import (
    AggregateConsumer,
    GeneratorWiring,
    LinkableConsumer,
    add_generator_dependency,
    resolve_consumer,
)


@pytest.fixture()
def graph() -> InMemoryBuildGraph:
    g = InMemoryBuildGraph()
    g.declare_target("blur_gen", "executable")
    g.declare_target("demo_app", "executable")
    g.declare_target("all_filters", "utility")
    return g


def make_request(**overrides) -> GeneratorRequest:
    fields = dict(generator_target="blur_gen", generator_name="Blur", function_name="blur")
    fields.update(overrides)
    return GeneratorRequest(**fields)


def test_resolve_consumer_returns_sum_type(graph) -> None:
    assert resolve_consumer(graph, "demo_app") == LinkableConsumer("demo_app")
    assert resolve_consumer(graph, "all_filters") == AggregateConsumer("all_filters")
    with pytest.raises(GDError) as exc:
        resolve_consumer(graph, "nope")
    assert exc.value.code is Err.UNKNOWN_TARGET


def test_declares_command_and_aggregate_nodes(graph, tmp_path: Path) -> None:
    dep = add_generator_dependency(make_request(), graph, paths=Paths(tmp_path), toolchain=UNIX)

    assert dep.node_id == "gen_Blur_blur"
    assert dep.target == "exec_generator_Blur_blur"
    node = graph.commands[dep.node_id]
    assert node.depends == ("blur_gen",)
    assert node.outputs == (tmp_path / "scratch_Blur" / "blur.a", tmp_path / "scratch_Blur" / "blur.h")
    assert node.working_dir == tmp_path / "scratch_Blur"
    assert node.inputs == (tmp_path / "bin" / "blur_gen",)
    aggregate = graph.targets[dep.target]
    assert aggregate.kind == "utility"
    assert aggregate.depends == [dep.node_id]
    assert aggregate.folder == "generator"


def test_no_consumer_means_no_edges(graph, tmp_path: Path) -> None:
    add_generator_dependency(make_request(), graph, paths=Paths(tmp_path), toolchain=UNIX)
    assert graph.targets["demo_app"].depends == []
    assert graph.targets["all_filters"].depends == []


def test_linkable_consumer_gets_link_and_include(graph, tmp_path: Path) -> None:
    dep = add_generator_dependency(
        make_request(consumer="demo_app"), graph, paths=Paths(tmp_path), toolchain=UNIX
    )
    app = graph.targets["demo_app"]
    assert app.depends == [dep.target]
    assert app.link_libraries == [dep.library]
    assert app.include_dirs == [("PRIVATE", dep.scratch_dir)]


def test_aggregate_consumer_gets_only_build_order(graph, tmp_path: Path) -> None:
    dep = add_generator_dependency(
        make_request(consumer="all_filters"), graph, paths=Paths(tmp_path), toolchain=UNIX
    )
    group = graph.targets["all_filters"]
    assert group.depends == [dep.target]
    assert group.link_libraries == []
    assert group.include_dirs == []
    assert dep.library == tmp_path / "scratch_Blur" / "blur.a"


def test_missing_consumer_is_configuration_error(graph, tmp_path: Path) -> None:
    with pytest.raises(GDError) as exc:
        add_generator_dependency(make_request(consumer="ghost"), graph, paths=Paths(tmp_path), toolchain=UNIX)
    assert exc.value.code is Err.UNKNOWN_TARGET


def test_msvc_declares_intermediate_and_archive_step(graph, tmp_path: Path) -> None:
    dep = add_generator_dependency(make_request(), graph, paths=Paths(tmp_path), toolchain=MSVC)
    node = graph.commands[dep.node_id]
    assert [p.name for p in node.outputs] == ["blur.lib", "blur.h", "blur.obj"]
    assert node.commands[1].argv[0] == "lib.exe"


def test_identical_redeclaration_reuses_node_for_second_consumer(graph, tmp_path: Path) -> None:
    wiring = GeneratorWiring(graph, paths=Paths(tmp_path), toolchain=UNIX)
    first = wiring.add(make_request(consumer="demo_app"))
    second = wiring.add(make_request(consumer="all_filters"))
    assert second is first
    assert list(graph.commands) == [first.node_id]
    assert graph.targets["all_filters"].depends == [first.target]


def test_shared_registry_across_calls_converges(graph, tmp_path: Path) -> None:
    registry = ScratchRegistry(Paths(tmp_path))
    first = add_generator_dependency(
        make_request(consumer="demo_app"), graph, paths=Paths(tmp_path), toolchain=UNIX, registry=registry
    )
    second = add_generator_dependency(
        make_request(consumer="all_filters"), graph, paths=Paths(tmp_path), toolchain=UNIX, registry=registry
    )
    assert second.target == first.target
    assert second.library == first.library
    assert len(graph.commands) == 1


def test_conflicting_redeclaration_is_rejected(graph, tmp_path: Path) -> None:
    wiring = GeneratorWiring(graph, paths=Paths(tmp_path), toolchain=UNIX)
    wiring.add(make_request())
    with pytest.raises(GDError) as exc:
        wiring.add(make_request(generator_args=["target=arm-64-linux"]))
    assert exc.value.code is Err.ARTIFACT_COLLISION


def test_rejected_request_does_not_block_corrected_one(graph, tmp_path: Path) -> None:
    registry = ScratchRegistry(Paths(tmp_path))
    wiring = GeneratorWiring(graph, paths=Paths(tmp_path), toolchain=UNIX, registry=registry)
    with pytest.raises(GDError) as exc:
        wiring.add(make_request(generator_args=["-e", "pnacl_notes"]))
    assert exc.value.code is Err.AMBIGUOUS_VARIANT
    assert list(registry.claims()) == []

    dep = wiring.add(make_request(generator_args=["-e", "html"], consumer="demo_app"))
    assert dep.node_id in graph.commands
    assert graph.targets["demo_app"].link_libraries == [dep.library]


def test_failed_graph_declaration_can_be_retried(graph, tmp_path: Path, monkeypatch) -> None:
    wiring = GeneratorWiring(graph, paths=Paths(tmp_path), toolchain=UNIX)
    real_add = graph.add_custom_command
    calls = []

    def fail_once(node):
        calls.append(node.node_id)
        if len(calls) == 1:
            raise GDError(Err.INVALID_GRAPH, ctx={"reason": "host_refused"})
        return real_add(node)

    monkeypatch.setattr(graph, "add_custom_command", fail_once)
    with pytest.raises(GDError):
        wiring.add(make_request())
    assert graph.commands == {}

    dep = wiring.add(make_request())
    assert calls == [dep.node_id, dep.node_id]
    assert dep.node_id in graph.commands
    assert graph.targets[dep.target].depends == [dep.node_id]


def test_shared_registry_with_other_graph_is_rejected(graph, tmp_path: Path) -> None:
    registry = ScratchRegistry(Paths(tmp_path))
    add_generator_dependency(make_request(), graph, paths=Paths(tmp_path), toolchain=UNIX, registry=registry)

    other = InMemoryBuildGraph()
    other.declare_target("blur_gen", "executable")
    with pytest.raises(GDError) as exc:
        add_generator_dependency(make_request(), other, paths=Paths(tmp_path), toolchain=UNIX, registry=registry)
    assert exc.value.code is Err.INVALID_GRAPH
    assert exc.value.ctx["reason"] == "claimed_step_not_in_graph"
    assert other.commands == {}
