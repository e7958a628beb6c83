from pathlib import Path

from gendeps.artifacts import artifact_set
from gendeps.layout.paths import Paths
from gendeps.models import GeneratorRequest
from gendeps.planner import generator_args, plan_commands, plan_invocation
from gendeps.toolchains import MSVC, UNIX, XCODE


def make_request(args=()) -> GeneratorRequest:
    return GeneratorRequest(
        generator_target="blur_gen",
        generator_name="Blur",
        function_name="blur",
        function_namespace="img::",
        generator_args=args,
    )


def test_generator_args_fixed_prefix_then_extras_in_order(tmp_path: Path) -> None:
    args = generator_args(make_request(["target=host", "-e", "html", "target=host-opengl"]), tmp_path)
    assert args[:6] == ("-g", "Blur", "-f", "img::blur", "-o", str(tmp_path))
    assert args[6:] == ("target=host", "-e", "html", "target=host-opengl")


def test_default_plan_runs_generator_once(tmp_path: Path) -> None:
    paths = Paths(tmp_path)
    scratch = tmp_path / "scratch_Blur"
    artifacts = artifact_set(scratch, "blur", "default", UNIX)
    commands = plan_commands(make_request(), scratch, artifacts, "default", UNIX, paths)
    assert len(commands) == 1
    assert commands[0].argv[0] == str(tmp_path / "bin" / "blur_gen")
    assert commands[0].argv[1:] == generator_args(make_request(), scratch)


def test_archive_plan_appends_archiver(tmp_path: Path) -> None:
    paths = Paths(tmp_path)
    scratch = tmp_path / "scratch_Blur"
    artifacts = artifact_set(scratch, "blur", "msvc-archive", MSVC)
    commands = plan_commands(make_request(), scratch, artifacts, "msvc-archive", MSVC, paths)
    assert [c.argv[0] for c in commands] == [str(tmp_path / "bin" / "blur_gen.exe"), "lib.exe"]
    assert commands[1].argv[1:] == (f"/OUT:{scratch / 'blur.lib'}", str(scratch / "blur.obj"))


def test_ide_plan_keeps_configuration_placeholder(tmp_path: Path) -> None:
    paths = Paths(tmp_path)
    scratch = tmp_path / "scratch_Blur"
    artifacts = artifact_set(scratch, "blur", "ide-configuration-deferred", XCODE)
    (command,) = plan_commands(make_request(), scratch, artifacts, "ide-configuration-deferred", XCODE, paths)
    assert "$(CONFIGURATION)" in command.argv[0]


def test_bitcode_plan_skips_archiving_even_on_msvc(tmp_path: Path) -> None:
    paths = Paths(tmp_path)
    scratch = tmp_path / "scratch_Blur"
    request = make_request(["target=pnacl-32-nacl"])
    artifacts = artifact_set(scratch, "blur", "bitcode-only", MSVC)
    plan = plan_invocation(request, scratch, artifacts, "bitcode-only", MSVC, paths)
    assert len(plan.commands) == 1
    assert plan.working_dir == scratch
    assert plan.executable == tmp_path / "bin" / "blur_gen.exe"
    assert plan.args[-1] == "target=pnacl-32-nacl"
