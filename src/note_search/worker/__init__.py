"""Worker thread, message protocol and request correlation."""

from note_search.worker.channel import WorkerChannel
from note_search.worker.correlator import PendingRequest, RequestCorrelator, generate_request_id
from note_search.worker.protocol import (
    ErrorPayload,
    InboundEnvelope,
    OutboundEnvelope,
    decode_inbound,
    decode_outbound,
    encode_inbound,
    encode_outbound,
)


__all__ = [
    "ErrorPayload",
    "InboundEnvelope",
    "OutboundEnvelope",
    "PendingRequest",
    "RequestCorrelator",
    "WorkerChannel",
    "decode_inbound",
    "decode_outbound",
    "encode_inbound",
    "encode_outbound",
    "generate_request_id",
]
