"""Context propagation for request correlation in worker logs."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar


# Request currently being handled by the worker thread, if any
request_context: ContextVar[str | None] = ContextVar("request_context", default=None)


def get_request_id() -> str | None:
    return request_context.get()


@contextmanager
def bind_request_id(request_id: str) -> Iterator[None]:
    """Expose ``request_id`` to log records emitted inside the block."""
    token = request_context.set(request_id)
    try:
        yield
    finally:
        request_context.reset(token)
