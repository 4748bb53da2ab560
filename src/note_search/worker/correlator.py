"""Correlate responses from the worker with the callers that asked for them.

Every submitted request gets a fresh uuid4 id and a pending future. The
response carrying that id resolves the future and removes the entry;
responses may arrive in any order. All bookkeeping happens on the event loop
thread, so the pending map needs no lock.

Hardening over a plain request/response map:

* a transport failure rejects every pending request, since it cannot be
  attributed to any one of them;
* requests can time out or be cancelled, and both remove the pending entry.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
import logging
import time
from typing import Any
from uuid import uuid4
import warnings

from note_search.domain.requests import Request
from note_search.errors import (
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
    UnknownRequestIdWarning,
)
from note_search.observability import PENDING_REQUESTS
from note_search.worker.protocol import InboundEnvelope, decode_outbound, decode_result, encode_inbound


logger = logging.getLogger(__name__)

_NO_TIMEOUT = object()


def generate_request_id() -> str:
    """Generate a 32-char hex request id."""
    return uuid4().hex


@dataclass
class PendingRequest:
    """Bookkeeping for one in-flight request."""

    request: Request
    future: asyncio.Future[Any]
    submitted_at: float = field(default_factory=time.monotonic)
    timeout_handle: asyncio.TimerHandle | None = None

    def cancel_timer(self) -> None:
        if self.timeout_handle is not None:
            self.timeout_handle.cancel()
            self.timeout_handle = None


class RequestCorrelator:
    """Pair worker responses with pending futures by request id."""

    def __init__(
        self,
        dispatch: Callable[[bytes], None],
        *,
        default_timeout: float | None = None,
        id_factory: Callable[[], str] = generate_request_id,
    ) -> None:
        self._dispatch = dispatch
        self._default_timeout = default_timeout
        self._id_factory = id_factory
        self._pending: dict[str, PendingRequest] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def pending_ids(self) -> tuple[str, ...]:
        return tuple(self._pending)

    def submit(self, request: Request, *, timeout: float | None | object = _NO_TIMEOUT) -> asyncio.Future[Any]:
        """Dispatch ``request`` and return a future for its result.

        Returns immediately; the caller suspends only when awaiting the
        future. Must be called from a running event loop.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        request_id = self._new_request_id()

        try:
            raw = encode_inbound(InboundEnvelope(request_id=request_id, request=request))
        except TransportError as exc:
            future.set_exception(exc)
            return future

        pending = PendingRequest(request=request, future=future)
        self._pending[request_id] = pending
        future.add_done_callback(lambda done: self._on_future_done(request_id, done))

        effective_timeout = self._default_timeout if timeout is _NO_TIMEOUT else timeout
        if effective_timeout is not None:
            pending.timeout_handle = loop.call_later(effective_timeout, self._expire, request_id, effective_timeout)

        try:
            self._dispatch(raw)
        except TransportError as exc:
            self._reject(request_id, exc)
        else:
            logger.debug("Submitted %s request %s", request.message, request_id)
        self._update_gauge()
        return future

    def handle_response(self, raw: bytes) -> None:
        """Resolve the pending future matching an encoded response."""
        try:
            envelope = decode_outbound(raw)
        except TransportError as exc:
            logger.error("Undecodable response from worker: %s", exc)
            self.fail_all(exc)
            return

        pending = self._pending.pop(envelope.request_id, None)
        self._update_gauge()
        if pending is None:
            msg = f"Dropping response for unknown request id {envelope.request_id}"
            logger.warning(msg)
            warnings.warn(msg, UnknownRequestIdWarning, stacklevel=2)
            return

        pending.cancel_timer()
        if pending.future.done():
            return
        if envelope.error is not None:
            pending.future.set_exception(envelope.error.to_exception())
            return
        try:
            pending.future.set_result(decode_result(pending.request, envelope.result))
        except (TransportError, KeyError, TypeError, ValueError) as exc:
            failure = exc if isinstance(exc, TransportError) else TransportError(f"Malformed result payload: {exc}")
            pending.future.set_exception(failure)

    def fail_all(self, exc: BaseException) -> int:
        """Reject every pending request with ``exc``; return how many were rejected."""
        pending, self._pending = self._pending, {}
        self._update_gauge()
        for entry in pending.values():
            entry.cancel_timer()
            if not entry.future.done():
                entry.future.set_exception(exc)
        if pending:
            logger.warning("Rejected %d pending request(s): %s", len(pending), exc)
        return len(pending)

    def cancel(self, request_id: str) -> bool:
        """Fail a pending request with :class:`RequestCancelledError`.

        The worker may still execute it; its response is then dropped as
        unknown.
        """
        return self._reject(request_id, RequestCancelledError(f"Request {request_id} was cancelled"))

    def _expire(self, request_id: str, timeout: float) -> None:
        if self._reject(request_id, RequestTimeoutError(f"Request {request_id} timed out after {timeout:.3f}s")):
            logger.warning("Request %s timed out after %.3fs", request_id, timeout)

    def _reject(self, request_id: str, exc: BaseException) -> bool:
        pending = self._pending.pop(request_id, None)
        self._update_gauge()
        if pending is None:
            return False
        pending.cancel_timer()
        if not pending.future.done():
            pending.future.set_exception(exc)
        return True

    def _on_future_done(self, request_id: str, future: asyncio.Future[Any]) -> None:
        # Only caller-side cancellation leaves a stale entry behind
        if future.cancelled():
            pending = self._pending.pop(request_id, None)
            if pending is not None:
                pending.cancel_timer()
                self._update_gauge()

    def _new_request_id(self) -> str:
        request_id = self._id_factory()
        while request_id in self._pending:
            request_id = self._id_factory()
        return request_id

    def _update_gauge(self) -> None:
        PENDING_REQUESTS.set(len(self._pending))
