"""Wire codec for card game client/server packets."""

__version__ = "0.1.0"
