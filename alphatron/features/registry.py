"""Feature registry and decorator."""

from typing import Any, Callable, Dict, Iterable, List, Type

import structlog

from ..errors import UnknownFeatureError
from ..storage import DocumentStore
from .base import Feature


logger = structlog.get_logger(__name__)


class FeatureRegistry:
    """Registry of the features that react to events."""

    def __init__(self) -> None:
        """Initialize the feature registry."""
        self._features: Dict[str, Feature] = {}

        logger.debug("Initialized FeatureRegistry")

    def register(self, feature: Feature) -> None:
        """Register a feature.

        Args:
            feature: Feature instance to register
        """
        if feature.name in self._features:
            logger.warning("Overriding existing feature", feature=feature.name)

        # Readers hold on to the old dict, so replace rather than mutate
        features = dict(self._features)
        features[feature.name] = feature
        self._features = features

        logger.info(
            "Registered feature",
            feature=feature.name,
            description=feature.description
        )

    def get_features(self) -> List[Feature]:
        """Get all registered features in registration order."""
        return list(self._features.values())

    def select(self, names: Iterable[str]) -> List[Feature]:
        """Get the named features.

        Args:
            names: Feature names to pick

        Returns:
            The features, in the order the names were given

        Raises:
            UnknownFeatureError: If a name is not registered
        """
        features = self._features
        selected = []
        for name in names:
            if name not in features:
                raise UnknownFeatureError(
                    f"Feature '{name}' is not registered "
                    f"(available: {', '.join(features) or 'none'})"
                )
            selected.append(features[name])
        return selected

    def bind_all(self, store: DocumentStore) -> None:
        """Hand the document store to every registered feature."""
        for feature in self._features.values():
            feature.bind(store)

    def list_features(self) -> List[Dict[str, str]]:
        """List all registered features.

        Returns:
            List of feature info dictionaries
        """
        return [
            {
                "name": name,
                "description": feature.description
            }
            for name, feature in self._features.items()
        ]

    def get_stats(self) -> Dict[str, Any]:
        """Get registry statistics.

        Returns:
            Dictionary with statistics
        """
        return {
            "registered_features": len(self._features),
            "feature_names": list(self._features.keys())
        }


# Global feature registry instance
_feature_registry = FeatureRegistry()


def register_feature(name: str, description: str = "") -> Callable[[Type[Feature]], Type[Feature]]:
    """Decorator to register a feature class with the global registry.

    Args:
        name: Name of the feature
        description: Optional description

    Returns:
        Decorator function
    """
    def decorator(cls: Type[Feature]) -> Type[Feature]:
        _feature_registry.register(cls(name, description or f"Feature handler for {name}"))
        return cls

    return decorator


def get_feature_registry() -> FeatureRegistry:
    """Get the global feature registry instance."""
    return _feature_registry
