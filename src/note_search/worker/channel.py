"""Dedicated worker thread that owns the index engine.

Encoded inbound envelopes are queued FIFO and handled one at a time on the
worker thread, so engine state is only ever touched by that thread. Each
response is handed to ``on_response`` as encoded bytes. Failures of the
boundary itself (an undecodable envelope, an unencodable result, the loop
dying) are reported through ``on_transport_error`` because they cannot be
pinned on a single request.

Both callbacks run on the worker thread; the caller decides how to hop back
to its own execution context.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
import queue
import threading

from note_search.errors import NoteSearchError, TransportError, WorkerBusyError
from note_search.observability import REQUEST_COUNT, REQUEST_LATENCY, TRANSPORT_ERRORS, bind_request_id, track_latency
from note_search.search.engine import IndexEngine
from note_search.worker.protocol import (
    ErrorPayload,
    OutboundEnvelope,
    decode_inbound,
    encode_outbound,
    encode_result,
)


logger = logging.getLogger(__name__)

_STOP = object()


class WorkerChannel:
    """Run an :class:`IndexEngine` on its own thread behind a message queue."""

    def __init__(
        self,
        on_response: Callable[[bytes], None],
        on_transport_error: Callable[[TransportError], None],
        *,
        engine_factory: Callable[[], IndexEngine] = IndexEngine,
        thread_name: str = "note-search-worker",
        queue_size: int = 0,
    ) -> None:
        self._on_response = on_response
        self._on_transport_error = on_transport_error
        self._engine_factory = engine_factory
        self._thread_name = thread_name
        self._inbound: queue.Queue[object] = queue.Queue(maxsize=queue_size)
        self._thread: threading.Thread | None = None
        self._accepting = False

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_alive:
            return
        # Built here so a failing engine factory raises in the caller
        engine = self._engine_factory()
        self._accepting = True
        self._thread = threading.Thread(target=self._run, args=(engine,), name=self._thread_name, daemon=True)
        self._thread.start()
        logger.info("Worker thread %s started", self._thread_name)

    def send(self, raw: bytes) -> None:
        """Queue one encoded inbound envelope for the worker without blocking.

        Raises:
            TransportError: The worker is not running.
            WorkerBusyError: The bounded inbound queue is full.
        """
        if not self._accepting or not self.is_alive:
            raise TransportError("Worker channel is not running")
        try:
            self._inbound.put_nowait(raw)
        except queue.Full:
            raise WorkerBusyError(f"Worker inbound queue is full ({self._inbound.maxsize} queued)") from None

    def stop(self, timeout: float | None = None) -> None:
        """Let queued requests drain, then stop the worker thread."""
        if self._thread is None:
            return
        self._accepting = False
        if self._thread.is_alive():
            try:
                self._inbound.put(_STOP, timeout=timeout)
            except queue.Full:
                logger.warning("Worker thread %s queue stayed full for %.1fs", self._thread_name, timeout or 0.0)
                return
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Worker thread %s did not stop within %.1fs", self._thread_name, timeout or 0.0)
                return
        logger.info("Worker thread %s stopped", self._thread_name)
        self._thread = None

    def _run(self, engine: IndexEngine) -> None:
        try:
            while True:
                raw = self._inbound.get()
                if raw is _STOP:
                    break
                try:
                    response = self._process(engine, raw)
                except TransportError as exc:
                    TRANSPORT_ERRORS.inc()
                    logger.error("Dropping undeliverable envelope: %s", exc)
                    self._on_transport_error(exc)
                    continue
                self._on_response(response)
        except Exception as exc:
            TRANSPORT_ERRORS.inc()
            logger.exception("Worker thread %s crashed", self._thread_name)
            self._accepting = False
            failure = TransportError(f"Worker thread crashed: {type(exc).__name__}: {exc}")
            failure.__cause__ = exc
            self._on_transport_error(failure)

    def _process(self, engine: IndexEngine, raw: object) -> bytes:
        if not isinstance(raw, (bytes, bytearray)):
            raise TransportError(f"Expected encoded envelope bytes, got {type(raw).__name__}")
        envelope = decode_inbound(raw)
        message = envelope.request.message

        with bind_request_id(envelope.request_id), track_latency(REQUEST_LATENCY, message=message):
            try:
                result = encode_result(engine.handle(envelope.request))
            except NoteSearchError as exc:
                REQUEST_COUNT.labels(message=message, outcome="error").inc()
                logger.warning("%s request failed: %s", message, exc)
                return encode_outbound(
                    OutboundEnvelope(request_id=envelope.request_id, error=ErrorPayload.from_exception(exc))
                )
            except Exception as exc:
                REQUEST_COUNT.labels(message=message, outcome="error").inc()
                logger.exception("Unexpected failure while handling %s request", message)
                return encode_outbound(
                    OutboundEnvelope(request_id=envelope.request_id, error=ErrorPayload.from_exception(exc))
                )

            REQUEST_COUNT.labels(message=message, outcome="ok").inc()
            logger.debug("Handled %s request", message)
            return encode_outbound(OutboundEnvelope(request_id=envelope.request_id, result=result))
