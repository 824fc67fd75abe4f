from .stream_relay import StreamRelay

__all__ = ["StreamRelay"]
