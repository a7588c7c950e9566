"""Built-in features."""

# Import all built-in features to register them
from . import increment, ping

__all__ = []
