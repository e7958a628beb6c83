from __future__ import annotations

from functools import wraps
from typing import Any

from dagster import Failure, MetadataValue, get_dagster_logger

from ..utils.errors import GDError


__all__ = ["with_node_error_boundary"]


def with_node_error_boundary(node: str):
    """Wrap an asset body so GDError surfaces as dagster.Failure.

    functools.wraps keeps the wrapped signature so Dagster context and
    resource binding are unchanged.
    """

    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except Failure:
                raise
            except GDError as err:
                description = f"[{node}] {err}"
                get_dagster_logger().error(description)
                metadata: dict[str, MetadataValue] = {
                    "error_code": MetadataValue.text(err.code.name)
                }
                if err.ctx:
                    metadata.update(_ctx_to_metadata(err.ctx))
                raise Failure(description=description, metadata=metadata) from err

        return wrapper

    return deco


def _ctx_to_metadata(ctx: dict[str, Any]) -> dict[str, MetadataValue]:
    try:
        return {"error_ctx": MetadataValue.json(ctx)}
    except TypeError:
        return {"error_ctx_repr": MetadataValue.text(repr(ctx))}
