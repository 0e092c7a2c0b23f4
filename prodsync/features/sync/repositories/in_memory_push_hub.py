"""In-process implementation of the PushChannel protocol."""

import logging
from collections import defaultdict
from typing import override

from prodsync.features.sync.models import PushEvent
from prodsync.features.sync.repositories.protocols import PushChannel, PushHandler

logger = logging.getLogger(__name__)


class InMemoryPushHub(PushChannel):
    """Fan-out of push events to subscribers, one room per production.

    Delivery is synchronous and in subscription order.
    """

    def __init__(self) -> None:
        self._rooms: defaultdict[str, list[PushHandler]] = defaultdict(list)

    @override
    def subscribe(self, production_id: str, handler: PushHandler) -> None:
        room = self._rooms[production_id]
        if handler not in room:
            room.append(handler)

    @override
    def unsubscribe(self, production_id: str, handler: PushHandler) -> None:
        room = self._rooms.get(production_id)
        if room and handler in room:
            room.remove(handler)
        if not room:
            self._rooms.pop(production_id, None)

    def subscriber_count(self, production_id: str) -> int:
        return len(self._rooms.get(production_id, ()))

    def publish(self, production_id: str, event: PushEvent) -> int:
        """Deliver an event to every subscriber of the production.

        A failing subscriber is logged and does not stop delivery to the rest.

        Returns:
            Number of handlers the event was delivered to.
        """
        delivered = 0
        for handler in list(self._rooms.get(production_id, ())):
            try:
                _ = handler(event)
            except Exception:
                logger.exception(
                    "Push handler failed for %s:%s %s",
                    event.entity_kind,
                    event.action.value,
                    event.entity_id,
                )
                continue
            delivered += 1
        return delivered
