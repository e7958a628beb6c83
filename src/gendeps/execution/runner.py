from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from ..graph.model import CustomCommand
from ..utils.errors import GDError, Err

logger = logging.getLogger(__name__)

_STDERR_TAIL = 2000


@dataclass(frozen=True)
class CommandRunResult:
    node_id: str
    skipped: bool
    outputs: tuple[Path, ...]
    commands_run: int


def substitute_configuration(value: str, placeholder: str | None, configuration: str | None) -> str:
    """Replace the IDE configuration placeholder the way the IDE's build step would."""

    if not placeholder or placeholder not in value:
        return value
    if not configuration:
        raise GDError(
            Err.GENERATION_FAILED,
            ctx={"reason": "unresolved_configuration_placeholder", "placeholder": placeholder, "value": value},
        )
    return value.replace(placeholder, configuration)


def _latest_mtime(paths: Sequence[Path]) -> float | None:
    stamps = []
    for path in paths:
        if not path.exists():
            return None
        stamps.append(path.stat().st_mtime)
    return max(stamps) if stamps else 0.0


def is_up_to_date(outputs: Sequence[Path], inputs: Sequence[Path]) -> bool:
    """True when every output exists and none is older than any input."""

    if not outputs or not all(p.exists() for p in outputs):
        return False
    newest_input = _latest_mtime(inputs)
    if newest_input is None:
        return False
    oldest_output = min(p.stat().st_mtime for p in outputs)
    return oldest_output >= newest_input


def run_custom_command(
    node: CustomCommand,
    *,
    placeholder: str | None = None,
    configuration: str | None = None,
    force: bool = False,
    run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    log: logging.Logger | None = None,
) -> CommandRunResult:
    """Run a custom-command node's command sequence in order.

    Skips the node when its outputs are newer than its inputs (unless
    ``force``). Otherwise the declared outputs are removed first, so any
    non-zero exit or a declared output that this run did not write raises
    ``GENERATION_FAILED``; nothing is retried.
    """

    log = log or logger
    inputs = tuple(Path(substitute_configuration(str(p), placeholder, configuration)) for p in node.inputs)
    outputs = tuple(Path(p) for p in node.outputs)

    if not force and is_up_to_date(outputs, inputs):
        log.info("%s is up to date; skipping", node.node_id)
        return CommandRunResult(node_id=node.node_id, skipped=True, outputs=outputs, commands_run=0)

    working_dir = Path(node.working_dir)
    if not working_dir.is_dir():
        raise GDError(
            Err.GENERATION_FAILED,
            ctx={"node": node.node_id, "reason": "missing_working_dir", "path": str(working_dir)},
        )

    # Outputs left by an earlier run must not satisfy the missing-output check.
    for output in outputs:
        try:
            output.unlink(missing_ok=True)
        except OSError as exc:
            raise GDError(
                Err.IO_ERROR,
                ctx={"node": node.node_id, "reason": "stale_output_not_removable", "path": str(output)},
                cause=exc,
            )

    count = 0
    for command in node.commands:
        argv = [substitute_configuration(arg, placeholder, configuration) for arg in command.argv]
        log.info("%s: %s", node.node_id, command.description or " ".join(argv))
        try:
            proc = run(argv, cwd=str(working_dir), capture_output=True, text=True, check=False)
        except OSError as exc:
            raise GDError(
                Err.GENERATION_FAILED,
                ctx={"node": node.node_id, "reason": "command_not_runnable", "argv": argv},
                cause=exc,
            )
        count += 1
        if proc.returncode != 0:
            raise GDError(
                Err.GENERATION_FAILED,
                ctx={
                    "node": node.node_id,
                    "reason": "non_zero_exit",
                    "returncode": proc.returncode,
                    "argv": argv,
                    "stderr": (proc.stderr or "")[-_STDERR_TAIL:],
                },
            )

    missing = [str(p) for p in outputs if not p.exists()]
    if missing:
        raise GDError(
            Err.GENERATION_FAILED,
            ctx={"node": node.node_id, "reason": "declared_output_missing", "missing": missing},
        )
    return CommandRunResult(node_id=node.node_id, skipped=False, outputs=outputs, commands_run=count)
