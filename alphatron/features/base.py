"""Base class for feature handlers."""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from ..actions import ActionSet
from ..events import AppMentionEvent, Event
from ..storage import DocumentStore


logger = structlog.get_logger(__name__)


class Feature(ABC):
    """Base class for all bot features.

    A feature reacts to events by adding actions to the shared ActionSet.
    Every call to :meth:`on_event` must end with exactly one
    ``actions.ready()``, whether or not the feature acted.
    """

    def __init__(self, name: str, description: str) -> None:
        """Initialize feature.

        Args:
            name: Unique name for this feature
            description: Human-readable description
        """
        self.name = name
        self.description = description
        self.store: Optional[DocumentStore] = None

        logger.debug("Initialized feature", feature=name)

    def bind(self, store: DocumentStore) -> None:
        """Give the feature access to the document store."""
        self.store = store

    @abstractmethod
    async def on_event(self, event: Event, actions: ActionSet) -> None:
        """React to an event.

        Args:
            event: The event Slack delivered
            actions: Action set shared by all features for this request
        """
        pass

    def _is_command(self, event: Event, command: str) -> bool:
        """Check if the event is a two-word mention containing the command.

        Args:
            event: Incoming event
            command: Command word, e.g. 'ping'

        Returns:
            True for mentions like '@bot ping'
        """
        if not isinstance(event, AppMentionEvent):
            return False

        words = event.words()
        return len(words) == 2 and command in words
