"""Alphatron - a Slack bot that batches feature actions into one webhook response."""

__version__ = "0.1.0"
