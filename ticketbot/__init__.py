"""Support-ticket thread assistant for Discord."""

__version__ = "0.1.0"
