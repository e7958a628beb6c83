from .build_config import GeneratorBuildConfig

__all__ = ["GeneratorBuildConfig"]
