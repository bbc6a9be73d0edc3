"""Trace context carried into log records for correlation."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING
from uuid import uuid4


if TYPE_CHECKING:
    from collections.abc import Iterator

trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def generate_trace_id() -> str:
    """Generate a 32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-char hex span ID."""
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Get current trace context, creating trace and span ids on first use."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def update_span_id(span_id: str) -> Token[dict | None]:
    """Update span_id while preserving trace_id and extra fields.

    Returns the token that restores the previous context.
    """
    ctx = trace_context.get() or {}
    return trace_context.set({**ctx, "span_id": span_id})


@contextmanager
def bind_partition(partition_key: str) -> Iterator[None]:
    """Attach a partition key to every log record emitted inside the block."""
    ctx = get_trace_context()
    token = trace_context.set({**ctx, "partition": partition_key})
    try:
        yield
    finally:
        trace_context.reset(token)

