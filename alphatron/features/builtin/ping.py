"""Built-in feature that answers 'ping' with 'pong'."""

import structlog

from ...actions import ActionSet
from ...events import Event
from ..base import Feature
from ..registry import register_feature


logger = structlog.get_logger(__name__)


@register_feature("ping", "Reply 'pong' to '@bot ping'")
class PingFeature(Feature):
    """Feature that replies 'pong' when mentioned with 'ping'."""

    async def on_event(self, event: Event, actions: ActionSet) -> None:
        if not self._is_command(event, "ping"):
            actions.ready()
            return

        logger.info("Answering ping", channel=event.channel)

        actions.add("chat.postMessage", {
            "channel": event.channel,
            "text": "pong"
        }).ready()
