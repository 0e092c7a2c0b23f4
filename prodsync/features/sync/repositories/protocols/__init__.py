"""Repository protocols for the sync feature."""

from .mutation_transport import MutationTransport, WirePayload
from .push_channel import PushChannel, PushHandler

__all__ = [
    # Transport protocol and types
    "MutationTransport",
    "WirePayload",
    # Push protocol and types
    "PushChannel",
    "PushHandler",
]
