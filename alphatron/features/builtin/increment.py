"""Built-in feature that posts and then increments a persistent counter."""

import asyncio
from typing import Any, Dict

import structlog

from ...actions import ActionSet
from ...errors import DocumentStoreError
from ...events import Event
from ..base import Feature
from ..registry import register_feature


logger = structlog.get_logger(__name__)

COUNTER_COLLECTION = "features"
COUNTER_DOCUMENT = "increment"


@register_feature("increment", "Post the current count for '@bot increment', then add one")
class IncrementFeature(Feature):
    """Feature that reports a stored counter and bumps it."""

    def __init__(self, name: str, description: str) -> None:
        super().__init__(name, description)
        self._lock = asyncio.Lock()

    async def on_event(self, event: Event, actions: ActionSet) -> None:
        if not self._is_command(event, "increment"):
            actions.ready()
            return

        if self.store is None:
            logger.warning("Increment feature has no document store", feature=self.name)
            actions.ready()
            return

        # Held across read, post and write back
        async with self._lock:
            try:
                data = await self._load_counter()
            except DocumentStoreError as e:
                logger.error("Failed to read counter", feature=self.name, error=str(e))
                actions.ready()
                return

            actions.add("chat.postMessage", {
                "channel": event.channel,
                "text": data["count"]
            }).ready()

            data["count"] += 1

            try:
                await self.store.set(COUNTER_COLLECTION, COUNTER_DOCUMENT, data)
            except DocumentStoreError as e:
                logger.error(
                    "Failed to store counter",
                    feature=self.name,
                    count=data["count"],
                    error=str(e)
                )

    async def _load_counter(self) -> Dict[str, Any]:
        data = await self.store.get(COUNTER_COLLECTION, COUNTER_DOCUMENT)
        if data is None:
            return {"count": 0}

        if not isinstance(data.get("count"), int):
            raise DocumentStoreError(f"Counter document has no integer count: {data!r}")
        return data
