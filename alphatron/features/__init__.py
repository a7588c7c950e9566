"""Feature handlers that react to Slack events."""

from .base import Feature
from .registry import FeatureRegistry, get_feature_registry, register_feature

__all__ = ["Feature", "FeatureRegistry", "get_feature_registry", "register_feature"]
