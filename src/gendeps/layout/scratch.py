"""Scratch directories owned by (generator-name, target-suffix) pairs.

A scratch directory is derived purely from the build root and the key
``<generator-name><target-suffix>``. The registry tracks which pair owns each
directory and which function names have been claimed inside it, so two
requests can share a directory only when their output filenames differ.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .paths import Paths
from ..utils.errors import GDError, Err

logger = logging.getLogger(__name__)

_FORBIDDEN_KEY_CHARS = ("/", "\\", "\0")


def scratch_key(generator_name: str, target_suffix: str = "") -> str:
    name = str(generator_name or "").strip()
    if not name:
        raise GDError(Err.INVALID_REQUEST, ctx={"field": "generator_name", "reason": "missing"})
    key = f"{name}{target_suffix or ''}"
    if any(ch in key for ch in _FORBIDDEN_KEY_CHARS) or key in {".", ".."}:
        raise GDError(Err.INVALID_REQUEST, ctx={"reason": "scratch_key_not_a_dirname", "key": key})
    return key


def generator_output_path(build_root: Path | str, key: str) -> Path:
    """Return the scratch directory for ``key`` under ``build_root``, creating it.

    Repeated calls with the same inputs return the same path. Callers may use
    it to locate extra generator outputs (for example html reports) that are
    not part of the declared artifact set.
    """

    if not key or any(ch in key for ch in _FORBIDDEN_KEY_CHARS) or key in {".", ".."}:
        raise GDError(Err.INVALID_REQUEST, ctx={"reason": "scratch_key_not_a_dirname", "key": key})
    scratch_dir = Paths(Path(build_root)).scratch_dir(key)
    try:
        scratch_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise GDError(
            Err.IO_ERROR,
            ctx={"reason": "scratch_dir_create_failed", "path": str(scratch_dir)},
            cause=exc,
        )
    return scratch_dir


@dataclass(frozen=True)
class ScratchClaim:
    generator_name: str
    target_suffix: str
    function_name: str
    scratch_dir: Path
    fingerprint: tuple

    @property
    def key(self) -> str:
        return f"{self.generator_name}{self.target_suffix}"


class ScratchRegistry:
    """Registry of scratch directories with creation on first use."""

    def __init__(self, paths: Paths) -> None:
        self.paths = paths
        self._dirs: dict[tuple[str, str], Path] = {}
        # Case-folded directory names so case-insensitive filesystems cannot alias.
        self._owners: dict[str, tuple[str, str]] = {}
        self._claims: dict[tuple[str, str, str], ScratchClaim] = {}

    def resolve(self, generator_name: str, target_suffix: str = "") -> Path:
        pair = (str(generator_name).strip(), target_suffix or "")
        existing = self._dirs.get(pair)
        if existing is not None:
            return existing

        key = scratch_key(*pair)
        owner = self._owners.get(key.casefold())
        if owner is not None and owner != pair:
            raise GDError(
                Err.INVALID_CONFIG,
                ctx={
                    "reason": "scratch_dir_collision",
                    "key": key,
                    "pair": list(pair),
                    "owner": list(owner),
                },
            )

        scratch_dir = generator_output_path(self.paths.build_root, key)
        self._dirs[pair] = scratch_dir
        self._owners[key.casefold()] = pair
        logger.debug("scratch dir for %s%s -> %s", pair[0], pair[1], scratch_dir)
        return scratch_dir

    def claim(
        self,
        generator_name: str,
        target_suffix: str,
        function_name: str,
        fingerprint: tuple,
    ) -> tuple[ScratchClaim, bool]:
        """Claim ``function_name`` inside the pair's scratch dir.

        Returns ``(claim, created)``. An identical earlier claim is returned
        with ``created=False``; a claim for the same function with a different
        fingerprint is a configuration error.
        """

        scratch_dir = self.resolve(generator_name, target_suffix)
        pair = (str(generator_name).strip(), target_suffix or "")
        claim_key = (pair[0], pair[1], function_name.casefold())

        previous = self._claims.get(claim_key)
        if previous is not None:
            if previous.fingerprint == fingerprint and previous.function_name == function_name:
                return previous, False
            raise GDError(
                Err.ARTIFACT_COLLISION,
                ctx={
                    "key": previous.key,
                    "function": function_name,
                    "existing_function": previous.function_name,
                    "scratch_dir": str(scratch_dir),
                },
            )

        claim = ScratchClaim(
            generator_name=pair[0],
            target_suffix=pair[1],
            function_name=function_name,
            scratch_dir=scratch_dir,
            fingerprint=fingerprint,
        )
        self._claims[claim_key] = claim
        return claim, True

    def release(self, claim: ScratchClaim) -> None:
        """Drop ``claim`` so a failed declaration leaves no trace.

        The scratch dir itself stays owned by its pair.
        """

        claim_key = (claim.generator_name, claim.target_suffix, claim.function_name.casefold())
        if self._claims.get(claim_key) is claim:
            del self._claims[claim_key]

    def validate(self) -> None:
        """Re-check ownership of every claim; raise on the first inconsistency."""

        seen: dict[tuple[Path, str], ScratchClaim] = {}
        for claim in self._claims.values():
            pair = (claim.generator_name, claim.target_suffix)
            if self._dirs.get(pair) != claim.scratch_dir:
                raise GDError(
                    Err.INVALID_CONFIG,
                    ctx={"reason": "claim_outside_owned_dir", "key": claim.key, "function": claim.function_name},
                )
            slot = (claim.scratch_dir, claim.function_name.casefold())
            if slot in seen:
                raise GDError(
                    Err.ARTIFACT_COLLISION,
                    ctx={"key": claim.key, "function": claim.function_name},
                )
            seen[slot] = claim

    def claims(self) -> Iterator[ScratchClaim]:
        return iter(list(self._claims.values()))

    def __len__(self) -> int:
        return len(self._dirs)
