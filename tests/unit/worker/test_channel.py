"""Unit tests for the worker thread channel."""

from __future__ import annotations

import threading

import orjson
import pytest

from note_search.domain.requests import FlushRequest, IndexRequest, SearchRequest
from note_search.errors import TransportError, WorkerBusyError
from note_search.search.engine import IndexEngine
from note_search.worker.channel import WorkerChannel
from note_search.worker.protocol import InboundEnvelope, decode_outbound, encode_inbound


class Collector:
    """Thread-safe sink for channel callbacks."""

    def __init__(self, expected: int) -> None:
        self.responses: list = []
        self.errors: list[TransportError] = []
        self.threads: set[str] = set()
        self._expected = expected
        self._lock = threading.Lock()
        self.done = threading.Event()

    def on_response(self, raw: bytes) -> None:
        self._record(self.responses, decode_outbound(raw))

    def on_error(self, exc: TransportError) -> None:
        self._record(self.errors, exc)

    def _record(self, bucket: list, item) -> None:
        with self._lock:
            bucket.append(item)
            self.threads.add(threading.current_thread().name)
            if len(self.responses) + len(self.errors) >= self._expected:
                self.done.set()


def _envelope(request_id: str, request) -> bytes:
    return encode_inbound(InboundEnvelope(request_id=request_id, request=request))


@pytest.fixture
def make_channel():
    channels: list[WorkerChannel] = []

    def factory(collector: Collector, **kwargs) -> WorkerChannel:
        channel = WorkerChannel(collector.on_response, collector.on_error, thread_name="test-worker", **kwargs)
        channels.append(channel)
        channel.start()
        return channel

    yield factory
    for channel in channels:
        channel.stop(timeout=5)


@pytest.mark.unit
def test_processes_requests_in_order_on_worker_thread(make_channel):
    collector = Collector(expected=3)
    channel = make_channel(collector)

    channel.send(_envelope("r1", IndexRequest(notes=[{"id": "d1", "text": "the cat sat"}])))
    channel.send(_envelope("r2", SearchRequest(terms=["cat", "zzz"])))
    channel.send(_envelope("r3", FlushRequest()))

    assert collector.done.wait(5)
    assert [r.request_id for r in collector.responses] == ["r1", "r2", "r3"]
    assert collector.responses[1].result["cat"][0]["positions"] == {"d1": [1]}
    assert "zzz" not in collector.responses[1].result
    assert collector.threads == {"test-worker"}


@pytest.mark.unit
def test_engine_errors_come_back_in_the_envelope(make_channel):
    collector = Collector(expected=2)
    channel = make_channel(collector)

    channel.send(_envelope("bad", IndexRequest(notes=[{"id": "d1", "text": None}])))
    channel.send(_envelope("ok", SearchRequest(terms=["d1"])))

    assert collector.done.wait(5)
    bad, ok = collector.responses
    assert bad.error.type == "MalformedDocumentError"
    assert ok.ok and ok.result == {}
    assert collector.errors == []


@pytest.mark.unit
def test_undecodable_envelope_reports_transport_error_and_keeps_running(make_channel):
    collector = Collector(expected=2)
    channel = make_channel(collector)

    channel.send(b"not an envelope")
    channel.send(_envelope("r1", FlushRequest()))

    assert collector.done.wait(5)
    assert len(collector.errors) == 1
    assert [r.request_id for r in collector.responses] == ["r1"]
    assert channel.is_alive


@pytest.mark.unit
def test_unexpected_engine_failure_is_returned_not_raised(make_channel):
    class ExplodingEngine(IndexEngine):
        def search(self, terms):
            raise ZeroDivisionError("boom")

    collector = Collector(expected=1)
    channel = make_channel(collector, engine_factory=ExplodingEngine)

    channel.send(_envelope("r1", SearchRequest(terms=["x"])))

    assert collector.done.wait(5)
    assert collector.responses[0].error.type == "NoteSearchError"
    assert "ZeroDivisionError" in collector.responses[0].error.message
    assert channel.is_alive


@pytest.mark.unit
def test_crash_in_callback_reports_transport_error():
    collector = Collector(expected=1)

    def broken_on_response(raw: bytes) -> None:
        raise RuntimeError("delivery failed")

    channel = WorkerChannel(broken_on_response, collector.on_error, thread_name="crashy-worker")
    channel.start()
    channel.send(_envelope("r1", FlushRequest()))

    assert collector.done.wait(5)
    assert "delivery failed" in str(collector.errors[0])
    channel.stop(timeout=5)
    assert not channel.is_alive
    with pytest.raises(TransportError):
        channel.send(_envelope("r2", FlushRequest()))


@pytest.mark.unit
def test_send_before_start_or_after_stop_fails():
    collector = Collector(expected=1)
    channel = WorkerChannel(collector.on_response, collector.on_error)

    with pytest.raises(TransportError):
        channel.send(orjson.dumps({}))

    channel.start()
    channel.stop(timeout=5)

    with pytest.raises(TransportError):
        channel.send(_envelope("r1", FlushRequest()))


@pytest.mark.unit
def test_stop_drains_queued_requests(make_channel):
    collector = Collector(expected=20)
    channel = make_channel(collector)

    for i in range(20):
        channel.send(_envelope(f"r{i}", IndexRequest(notes=[{"id": f"d{i}", "text": "note text"}])))
    channel.stop(timeout=5)

    assert len(collector.responses) == 20
    assert not channel.is_alive


@pytest.mark.unit
def test_full_bounded_queue_raises_instead_of_blocking(make_channel):
    started = threading.Event()
    release = threading.Event()

    class GatedEngine(IndexEngine):
        def flush(self):
            started.set()
            release.wait(5)
            super().flush()

    collector = Collector(expected=2)
    channel = make_channel(collector, engine_factory=GatedEngine, queue_size=1)

    channel.send(_envelope("r1", FlushRequest()))
    assert started.wait(5)
    channel.send(_envelope("r2", FlushRequest()))

    with pytest.raises(WorkerBusyError, match="queue is full"):
        channel.send(_envelope("r3", FlushRequest()))

    release.set()
    assert collector.done.wait(5)
    assert [r.request_id for r in collector.responses] == ["r1", "r2"]
    assert collector.errors == []
