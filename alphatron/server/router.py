"""Routing of Slack event callbacks to features."""

import asyncio
import functools
import hmac
import time
from typing import Any, Dict, List, Optional, Sequence, Set

import structlog
from aiohttp import web
from prometheus_client import Counter, Histogram
from pydantic import ValidationError

from ..actions import ActionSet, FutureResponseSink
from ..config import SettingsCache
from ..errors import SettingsNotLoadedError
from ..events import Event, EventEnvelope, parse_event
from ..features import Feature


logger = structlog.get_logger(__name__)

# Prometheus metrics
REQUESTS_TOTAL = Counter(
    "alphatron_requests_total",
    "Total number of event requests received",
    ["outcome"],
)

FLUSH_DURATION = Histogram(
    "alphatron_flush_duration_seconds",
    "Time between dispatching an event and sending the batched actions",
)

FEATURE_FAILURES = Counter(
    "alphatron_feature_failures_total",
    "Total number of feature handlers that raised",
    ["feature"],
)

DEADLINE_FLUSHES = Counter(
    "alphatron_deadline_flushes_total",
    "Total number of responses flushed before every feature was ready",
)


def _token_matches(received: Any, expected: str) -> bool:
    if not isinstance(received, str):
        return False
    return hmac.compare_digest(received.encode(), expected.encode())


class EventRouter:
    """Authenticates event requests and fans events out to every feature."""

    def __init__(
        self,
        settings_cache: SettingsCache,
        features: Sequence[Feature],
        deadline_seconds: Optional[float] = 2.5,
    ) -> None:
        """Initialize event router.

        Args:
            settings_cache: Source of the verification token
            features: Features that receive every event
            deadline_seconds: Time features get to signal ready before a
                partial response is sent, None to wait indefinitely
        """
        self.settings_cache = settings_cache
        self.deadline_seconds = deadline_seconds
        self._features: List[Feature] = list(features)
        self._tasks: Set[asyncio.Task] = set()

        logger.info(
            "Initialized EventRouter",
            features=[feature.name for feature in self._features],
            deadline_seconds=deadline_seconds,
        )

    @property
    def features(self) -> List[Feature]:
        return list(self._features)

    def set_features(self, features: Sequence[Feature]) -> None:
        """Replace the set of features used for subsequent requests."""
        self._features = list(features)
        logger.info("Updated features", features=[feature.name for feature in self._features])

    async def handle(self, request: web.Request) -> web.Response:
        """Handle a POST from the Slack Events API."""
        body = await self._read_body(request)

        try:
            settings = await self.settings_cache.get()
        except SettingsNotLoadedError:
            logger.error("Received event before settings were loaded")
            REQUESTS_TOTAL.labels(outcome="unavailable").inc()
            return web.Response(status=503)

        if not _token_matches(body.get("token"), settings.token):
            # Drop requests without the correct verification token
            logger.warning("Dropping request with invalid verification token", remote=request.remote)
            REQUESTS_TOTAL.labels(outcome="forbidden").inc()
            return web.Response(status=403)

        try:
            envelope = EventEnvelope.model_validate(body)
        except ValidationError as e:
            logger.info("Rejecting malformed request", error=str(e))
            REQUESTS_TOTAL.labels(outcome="bad_request").inc()
            return web.Response(status=400)

        if not envelope.is_event_callback:
            logger.info("Rejecting unsupported request type", request_type=envelope.type)
            REQUESTS_TOTAL.labels(outcome="bad_request").inc()
            return web.Response(status=400)

        return await self.dispatch(parse_event(envelope.event))

    async def dispatch(self, event: Event) -> web.Response:
        """Give every feature a chance to react and wait for the batched response.

        Args:
            event: Event to hand to each feature

        Returns:
            JSON response listing all collected actions
        """
        features = self._features
        sink = FutureResponseSink()
        actions = ActionSet(sink, len(features))
        start_time = time.monotonic()

        logger.debug("Dispatching event", event_type=event.type, features=len(features))

        for feature in features:
            self._invoke(feature, event, actions)

        try:
            response = await sink.wait(timeout=self.deadline_seconds)
        except asyncio.TimeoutError:
            DEADLINE_FLUSHES.inc()
            logger.error(
                "Features did not signal ready before the deadline",
                event_type=event.type,
                outstanding_signals=actions.remaining_signals,
                deadline_seconds=self.deadline_seconds,
            )
            actions.expire()
            response = await sink.wait()

        FLUSH_DURATION.observe(time.monotonic() - start_time)
        REQUESTS_TOTAL.labels(outcome="dispatched").inc()

        logger.info(
            "Event handled",
            event_type=event.type,
            actions=len(actions.actions),
            duration=time.monotonic() - start_time,
        )
        return response

    def _invoke(self, feature: Feature, event: Event, actions: ActionSet) -> None:
        task = asyncio.create_task(
            feature.on_event(event, actions), name=f"feature:{feature.name}"
        )
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._on_feature_done, feature.name))

    def _on_feature_done(self, feature_name: str, task: asyncio.Task) -> None:
        self._tasks.discard(task)

        if task.cancelled():
            return

        error = task.exception()
        if error is not None:
            FEATURE_FAILURES.labels(feature=feature_name).inc()
            logger.error(
                "Feature handler failed",
                feature=feature_name,
                error=str(error),
                error_type=type(error).__name__,
            )

    async def _read_body(self, request: web.Request) -> Dict[str, Any]:
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    async def close(self) -> None:
        """Cancel feature handlers that are still running."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled running feature handlers", count=len(tasks))

    def get_stats(self) -> Dict[str, Any]:
        """Get router statistics.

        Returns:
            Dictionary with statistics
        """
        return {
            "features": [feature.name for feature in self._features],
            "running_handlers": len(self._tasks),
            "deadline_seconds": self.deadline_seconds,
        }
