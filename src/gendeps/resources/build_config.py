from typing import Optional

from dagster import ConfigurableResource
from pydantic import Field

from ..layout.paths import Paths
from ..toolchains import Toolchain, toolchain_for_name


class GeneratorBuildConfig(ConfigurableResource):
    """Build settings shared by every generator node.

    Attributes:
        build_root: Directory holding ``bin/`` and the ``scratch_*`` dirs.
        toolchain: Preset name (``unix``, ``msvc``, ``vs`` or ``xcode``).
        configuration: Build configuration substituted for the IDE placeholder
            (e.g. ``Debug``). Required only when a command still contains it.
        force: If True, rerun generator nodes even when their outputs are newer
            than the generator executable.
    """

    build_root: str = "build"
    toolchain: str = "unix"
    configuration: Optional[str] = None
    force: bool = Field(default=False)

    def paths(self) -> Paths:
        return Paths.from_str(self.build_root)

    def toolchain_preset(self) -> Toolchain:
        return toolchain_for_name(self.toolchain)
