"""Event stream transports and frame parsing."""

from paystream.stream.memory import FileEventSource, MemoryEventSource, MemorySubscription
from paystream.stream.parser import parse_frame
from paystream.stream.protocols import EventSource, Subscription
from paystream.stream.sse import HttpEventSource, SseSubscription, iter_sse_data

__all__ = [
    "EventSource",
    "Subscription",
    "parse_frame",
    "HttpEventSource",
    "SseSubscription",
    "iter_sse_data",
    "MemoryEventSource",
    "MemorySubscription",
    "FileEventSource",
]
