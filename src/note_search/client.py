"""Async facade over the worker channel and request correlator.

Typical use::

    async with NoteSearchClient() as client:
        await client.index([Document(id="n1", text="the cat sat")])
        hits = await client.search(["cat"])

Each method returns a future right away, so several requests can be in
flight at once. Each future resolves with the result of its own request.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
import logging
from typing import Any

from note_search.config import Settings
from note_search.domain.model import Document, validate_documents
from note_search.domain.requests import parse_request
from note_search.errors import MalformedDocumentError, TransportError
from note_search.search.engine import IndexEngine
from note_search.search.models import Posting, RankedDocument
from note_search.worker.channel import WorkerChannel
from note_search.worker.correlator import RequestCorrelator


logger = logging.getLogger(__name__)


class NoteSearchClient:
    """Submit index/search/flush/rank requests to a background index engine."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        engine_factory: Callable[[], IndexEngine] | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._engine_factory = engine_factory or self._default_engine_factory
        self._loop: asyncio.AbstractEventLoop | None = None
        self._channel: WorkerChannel | None = None
        self._correlator: RequestCorrelator | None = None

    async def __aenter__(self) -> NoteSearchClient:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def is_running(self) -> bool:
        return self._channel is not None and self._channel.is_alive

    @property
    def pending_count(self) -> int:
        return self._correlator.pending_count if self._correlator else 0

    async def start(self) -> None:
        if self.is_running:
            return
        self._loop = asyncio.get_running_loop()
        self._channel = WorkerChannel(
            on_response=self._post_response,
            on_transport_error=self._post_transport_error,
            engine_factory=self._engine_factory,
            thread_name=self.settings.worker_thread_name,
            queue_size=self.settings.inbound_queue_size,
        )
        self._correlator = RequestCorrelator(
            self._channel.send,
            default_timeout=self.settings.request_timeout_seconds,
        )
        self._channel.start()

    async def close(self) -> None:
        """Drain queued requests, stop the worker and reject anything left pending."""
        if self._channel is None:
            return
        channel, self._channel = self._channel, None
        await asyncio.to_thread(channel.stop, self.settings.shutdown_timeout_seconds)
        # Let responses posted while draining resolve before rejecting the rest
        await asyncio.sleep(0)
        if self._correlator is not None:
            self._correlator.fail_all(TransportError("Note search client closed"))

    def index(self, notes: Sequence[Document | Mapping[str, Any]]) -> asyncio.Future[None]:
        """Append ``notes`` to the index; resolves to ``None`` once applied.

        Notes are validated strictly before they are encoded, since the wire
        format would otherwise coerce values such as ``bytes`` into text. A
        malformed batch resolves to :class:`MalformedDocumentError` without
        reaching the worker.
        """
        if notes is None:
            return self._submit({"message": "INDEX", "notes": None})
        try:
            documents = validate_documents(notes)
        except MalformedDocumentError as exc:
            return self._rejected(exc)
        return self._submit({"message": "INDEX", "notes": [document.model_dump() for document in documents]})

    def search(self, terms: Sequence[str]) -> asyncio.Future[dict[str, list[Posting]]]:
        """Look up ``terms``; terms never indexed are absent from the result."""
        return self._submit({"message": "SEARCH", "terms": self._terms_payload(terms)})

    def flush(self) -> asyncio.Future[None]:
        return self._submit({"message": "FLUSH"})

    def rank(self, terms: Sequence[str], limit: int | None = None) -> asyncio.Future[list[RankedDocument]]:
        """Return documents matching ``terms`` ordered by BM25 score."""
        return self._submit({"message": "RANK", "terms": self._terms_payload(terms), "limit": limit})

    def cancel(self, future: asyncio.Future[Any]) -> bool:
        """Cancel a pending request by its future."""
        return future.cancel()

    def _submit(self, payload: dict[str, Any]) -> asyncio.Future[Any]:
        if self._correlator is None or self._channel is None:
            raise TransportError("Note search client is not started")
        request = parse_request(payload)
        return self._correlator.submit(request)

    def _default_engine_factory(self) -> IndexEngine:
        return IndexEngine(k1=self.settings.bm25_k1, b=self.settings.bm25_b)

    def _rejected(self, exc: BaseException) -> asyncio.Future[Any]:
        if self._correlator is None or self._channel is None:
            raise TransportError("Note search client is not started")
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        future.set_exception(exc)
        return future

    @staticmethod
    def _terms_payload(terms: Sequence[str] | None) -> Any:
        if terms is None or isinstance(terms, str):
            return terms
        return list(terms)

    def _post_response(self, raw: bytes) -> None:
        correlator = self._correlator
        if correlator is not None:
            self._call_in_loop(correlator.handle_response, raw)

    def _post_transport_error(self, exc: TransportError) -> None:
        correlator = self._correlator
        if correlator is not None:
            self._call_in_loop(correlator.fail_all, exc)

    def _call_in_loop(self, callback: Callable[..., Any], *args: Any) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.warning("Event loop is closed; dropping worker callback %s", getattr(callback, "__name__", callback))
            return
        try:
            loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            logger.warning("Event loop closed while delivering worker callback", exc_info=True)
