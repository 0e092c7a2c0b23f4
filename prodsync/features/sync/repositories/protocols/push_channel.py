"""Protocol definition for the push notification channel."""

from collections.abc import Callable
from typing import Protocol

from prodsync.features.sync.models import PushEvent

PushHandler = Callable[[PushEvent], object]


class PushChannel(Protocol):
    """Protocol for a subscription keyed by production id."""

    def subscribe(self, production_id: str, handler: PushHandler) -> None:
        """Deliver every event for the production to ``handler``."""
        ...

    def unsubscribe(self, production_id: str, handler: PushHandler) -> None:
        """Stop delivering events to ``handler``. Unknown handlers are ignored."""
        ...
