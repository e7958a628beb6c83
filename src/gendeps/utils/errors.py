from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class Err(Enum):
    INVALID_REQUEST = auto()
    INVALID_CONFIG = auto()
    ARTIFACT_COLLISION = auto()
    AMBIGUOUS_VARIANT = auto()
    UNKNOWN_TARGET = auto()
    INVALID_GRAPH = auto()
    IO_ERROR = auto()
    GENERATION_FAILED = auto()
    UNKNOWN = auto()


# Raised while the graph is being declared; never retried.
CONFIGURATION_ERRORS = frozenset(
    {
        Err.INVALID_REQUEST,
        Err.INVALID_CONFIG,
        Err.ARTIFACT_COLLISION,
        Err.AMBIGUOUS_VARIANT,
        Err.UNKNOWN_TARGET,
        Err.INVALID_GRAPH,
    }
)


@dataclass(eq=False)
class GDError(Exception):
    code: Err
    ctx: dict[str, Any] | None = None
    cause: Exception | None = None

    def __post_init__(self) -> None:
        if self.ctx is None:
            self.ctx = {}
        if self.cause is not None:
            self.__cause__ = self.cause
        super().__init__(self.code.name)

    @property
    def is_configuration_error(self) -> bool:
        return self.code in CONFIGURATION_ERRORS

    def __str__(self) -> str:
        parts = [self.code.name]
        if self.ctx:
            parts.append(str(self.ctx))
        return ": ".join(parts)
