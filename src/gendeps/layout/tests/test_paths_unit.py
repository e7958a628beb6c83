from pathlib import Path

import pytest

from gendeps.layout.paths import Paths
from gendeps.toolchains import MSVC, UNIX, VISUAL_STUDIO, XCODE
from gendeps.utils.errors import Err, GDError


def test_paths_reject_empty_build_root() -> None:
    with pytest.raises(GDError) as exc:
        Paths("")
    assert exc.value.code is Err.INVALID_CONFIG
    assert exc.value.ctx["reason"] == "paths_missing_build_root"


def test_paths_coerce_strings(tmp_path: Path) -> None:
    paths = Paths.from_str(str(tmp_path))
    assert paths.build_root == tmp_path
    assert paths.bin_dir == tmp_path / "bin"
    assert paths.scratch_dir("EdgeDetect") == tmp_path / "scratch_EdgeDetect"


def test_generator_executable_per_variant(tmp_path: Path) -> None:
    paths = Paths(tmp_path)
    assert paths.generator_executable("blur_gen", UNIX, "default") == tmp_path / "bin" / "blur_gen"
    assert paths.generator_executable("blur_gen", MSVC, "msvc-archive") == tmp_path / "bin" / "blur_gen.exe"
    assert (
        paths.generator_executable("blur_gen", XCODE, "ide-configuration-deferred")
        == tmp_path / "bin" / "$(CONFIGURATION)" / "blur_gen"
    )


def test_ide_executable_requires_placeholder(tmp_path: Path) -> None:
    with pytest.raises(GDError) as exc:
        Paths(tmp_path).generator_executable("blur_gen", UNIX, "ide-configuration-deferred")
    assert exc.value.ctx["reason"] == "ide_variant_requires_placeholder"


def test_multi_config_msvc_uses_configuration_dir(tmp_path: Path) -> None:
    paths = Paths(tmp_path)
    assert (
        paths.generator_executable("blur_gen", VISUAL_STUDIO, "msvc-archive")
        == tmp_path / "bin" / "$(Configuration)" / "blur_gen.exe"
    )
    # Bitcode requests still run the generator from the per-configuration dir.
    assert (
        paths.generator_executable("blur_gen", XCODE, "bitcode-only")
        == tmp_path / "bin" / "$(CONFIGURATION)" / "blur_gen"
    )
