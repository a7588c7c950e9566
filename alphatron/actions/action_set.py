"""Action collection and the per-request completion barrier."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

import structlog
from aiohttp import web
from prometheus_client import Counter


logger = structlog.get_logger(__name__)

SIGNAL_VIOLATIONS = Counter(
    "alphatron_signal_violations_total",
    "Feature handler calls that broke the ready/add contract",
    ["kind"],
)


class ResponseSink(Protocol):
    """Anything an ActionSet can write its final response body to."""

    def send_json(self, payload: Dict[str, Any]) -> None:
        ...


class FutureResponseSink:
    """One-shot response handle backed by an asyncio future.

    The request handler awaits :meth:`wait` while feature handlers run;
    the ActionSet resolves the future with a JSON response when it flushes.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def written(self) -> bool:
        return self._future.done()

    def send_json(self, payload: Dict[str, Any]) -> None:
        if self._future.done():
            raise RuntimeError("Response has already been written")
        self._future.set_result(web.json_response(payload))

    async def wait(self, timeout: Optional[float] = None) -> web.Response:
        """Wait for the response to be written.

        Args:
            timeout: Maximum time to wait in seconds, None to wait forever

        Raises:
            asyncio.TimeoutError: If nothing was written in time
        """
        return await asyncio.wait_for(asyncio.shield(self._future), timeout=timeout)


@dataclass(frozen=True)
class Action:
    """One Slack Web API call the platform should perform."""

    method: str
    body: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"method": self.method, "body": self.body}


class CollectorState(Enum):
    """Lifecycle of an ActionSet."""

    COLLECTING = "collecting"
    FLUSHED = "flushed"


class ActionSet:
    """Represents the set of actions the bot will execute for one request.

    Every participating feature must call :meth:`ready` exactly once, after
    adding its actions. The call that brings the outstanding count to zero
    writes all collected actions, in the order they were added, to the sink.
    """

    def __init__(self, sink: ResponseSink, expected_signals: int) -> None:
        """Create an empty set of actions.

        Args:
            sink: Where the batched response is written on flush
            expected_signals: Number of ready() calls to wait for

        Raises:
            ValueError: If expected_signals is negative
        """
        if expected_signals < 0:
            raise ValueError(
                f"expected_signals must be >= 0, got {expected_signals}"
            )

        self._sink = sink
        self._expected_signals = expected_signals
        self._remaining_signals = expected_signals
        self._actions: List[Action] = []
        self._state = CollectorState.COLLECTING
        self._expired = False

        # Nobody will ever call ready()
        if expected_signals == 0:
            self._flush()

    @property
    def expected_signals(self) -> int:
        return self._expected_signals

    @property
    def remaining_signals(self) -> int:
        return self._remaining_signals

    @property
    def state(self) -> CollectorState:
        return self._state

    @property
    def flushed(self) -> bool:
        return self._state is CollectorState.FLUSHED

    @property
    def actions(self) -> List[Action]:
        return list(self._actions)

    def add(self, method: str, body: Dict[str, Any]) -> "ActionSet":
        """Add an action to the set.

        Args:
            method: Slack API method, e.g. 'chat.postMessage'
            body: Arguments for the method, e.g. {"channel": "C1", "text": "hi"}

        Returns:
            This ActionSet, so that calls can be chained with ready()
        """
        if self.flushed:
            self._report_late_call("add", method=method)
            return self

        self._actions.append(Action(method=method, body=dict(body)))
        return self

    def ready(self) -> None:
        """Signal that one participant has added all of its actions."""
        if self.flushed:
            self._report_late_call("ready")
            return

        self._remaining_signals -= 1

        if self._remaining_signals == 0:
            self._flush()

    def expire(self) -> bool:
        """Flush whatever has been collected so far.

        Returns:
            True if this call flushed the set, False if it was already flushed
        """
        if self.flushed:
            return False

        logger.error(
            "Flushing partial action set",
            outstanding_signals=self._remaining_signals,
            expected_signals=self._expected_signals,
            actions=len(self._actions),
        )
        self._expired = True
        self._flush()
        return True

    def _flush(self) -> None:
        self._state = CollectorState.FLUSHED
        self._sink.send_json(
            {"actions": [action.to_dict() for action in self._actions]}
        )

        logger.debug(
            "Flushed action set",
            actions=len(self._actions),
            expected_signals=self._expected_signals,
        )

    def _report_late_call(self, call: str, **context: Any) -> None:
        # Stragglers after a deadline flush are expected, not a contract violation
        if self._expired:
            logger.debug("Ignoring call on expired action set", call=call, **context)
            return

        kind = "late_add" if call == "add" else "extra_ready"
        SIGNAL_VIOLATIONS.labels(kind=kind).inc()
        logger.warning(
            "Ignoring call on flushed action set",
            call=call,
            expected_signals=self._expected_signals,
            **context,
        )
