"""Cache and transport implementations for the sync feature."""

from .entity_cache import EntityCache
from .http_mutation_transport import HttpMutationTransport
from .in_memory_push_hub import InMemoryPushHub
from .protocols import MutationTransport, PushChannel

__all__ = [
    "EntityCache",
    "HttpMutationTransport",
    "InMemoryPushHub",
    "MutationTransport",
    "PushChannel",
]
