"""
Streaming Module

Client side of the token stream: wire frames, the incremental frame decoder,
cancellation tokens and slots, the throttled presentation updater, a
debouncer and the relay HTTP client.
"""

from .cancellation import CancellationToken, RequestLifecycleManager, RequestSlot
from .debounce import Debouncer
from .frame_decoder import FrameDecoder, decode_frames
from .frames import DONE_FRAME, Done, Error, StreamEvent, Token, encode_error, encode_token
from .relay_client import RelayClient
from .throttle import ThrottledUpdater

__all__ = [
    "CancellationToken",
    "RequestSlot",
    "RequestLifecycleManager",
    "Debouncer",
    "FrameDecoder",
    "decode_frames",
    "DONE_FRAME",
    "Done",
    "Error",
    "Token",
    "StreamEvent",
    "encode_token",
    "encode_error",
    "RelayClient",
    "ThrottledUpdater",
]
