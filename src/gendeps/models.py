"""Request and result types for generator dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

from .artifacts import ArtifactSet
from .types import PlatformVariant, VARIANTS
from .utils.errors import GDError, Err


def _require_text(value: Any, *, field: str) -> str:
    if value is None:
        raise GDError(Err.INVALID_REQUEST, ctx={"field": field, "reason": "missing"})
    text = str(value).strip()
    if not text:
        raise GDError(Err.INVALID_REQUEST, ctx={"field": field, "reason": "empty"})
    return text


def _coerce_args(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)):
        # A bare string would otherwise be split into characters.
        raise GDError(
            Err.INVALID_REQUEST,
            ctx={"field": "generator_args", "reason": "must be a sequence of strings", "value": value},
        )
    if not isinstance(value, Sequence):
        raise GDError(Err.INVALID_REQUEST, ctx={"field": "generator_args", "reason": "not a sequence"})
    args = tuple(value)
    for arg in args:
        if not isinstance(arg, str):
            raise GDError(
                Err.INVALID_REQUEST,
                ctx={"field": "generator_args", "reason": "non-string argument", "value": repr(arg)},
            )
    return args


@dataclass(frozen=True)
class GeneratorRequest:
    """One generator invocation to be declared in the build graph.

    ``generator_target`` names the executable target that builds the
    generator; ``generator_name`` is the generator class passed to ``-g``.
    ``function_namespace`` is prepended verbatim to the function name and
    must end in ``::`` when given. ``variant`` overrides variant detection.
    """

    generator_target: str
    generator_name: str
    function_name: str
    function_namespace: str = ""
    generator_args: tuple[str, ...] = ()
    target_suffix: str = ""
    consumer: str | None = None
    variant: PlatformVariant | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "generator_target", _require_text(self.generator_target, field="generator_target"))
        object.__setattr__(self, "generator_name", _require_text(self.generator_name, field="generator_name"))
        object.__setattr__(self, "function_name", _require_text(self.function_name, field="function_name"))
        object.__setattr__(self, "generator_args", _coerce_args(self.generator_args))
        object.__setattr__(self, "function_namespace", self.function_namespace or "")
        object.__setattr__(self, "target_suffix", self.target_suffix or "")

        if self.function_namespace and not self.function_namespace.endswith("::"):
            raise GDError(
                Err.INVALID_REQUEST,
                ctx={"field": "function_namespace", "reason": "must end with '::'", "value": self.function_namespace},
            )
        if self.consumer is not None:
            object.__setattr__(self, "consumer", _require_text(self.consumer, field="consumer"))
        if self.variant is not None and self.variant not in VARIANTS:
            raise GDError(
                Err.INVALID_REQUEST,
                ctx={"field": "variant", "value": self.variant, "known": list(VARIANTS)},
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GeneratorRequest":
        return cls(
            generator_target=data.get("generator_target"),
            generator_name=data.get("generator_name"),
            function_name=data.get("function_name"),
            function_namespace=data.get("function_namespace") or "",
            generator_args=data.get("generator_args") or (),
            target_suffix=data.get("target_suffix") or "",
            consumer=data.get("consumer"),
            variant=data.get("variant"),
        )

    @property
    def unique_name(self) -> str:
        return f"{self.generator_name}{self.target_suffix}"

    @property
    def qualified_function(self) -> str:
        return f"{self.function_namespace}{self.function_name}"

    def fingerprint(self) -> tuple:
        """Everything that changes what lands in the scratch dir, except the consumer."""

        return (
            self.generator_target,
            self.function_namespace,
            self.generator_args,
            self.variant,
        )


@dataclass(frozen=True)
class GeneratorDependency:
    """Declared generation step returned to callers for further chaining."""

    request: GeneratorRequest
    variant: PlatformVariant
    scratch_dir: Path
    artifacts: ArtifactSet
    node_id: str
    target: str

    @property
    def library(self) -> Path:
        return self.artifacts.library

    @property
    def header(self) -> Path:
        return self.artifacts.header
