"""Action collection for batched Slack responses."""

from .action_set import Action, ActionSet, CollectorState, FutureResponseSink, ResponseSink

__all__ = ["Action", "ActionSet", "CollectorState", "FutureResponseSink", "ResponseSink"]
