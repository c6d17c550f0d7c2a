"""Keep a review queue submission request alive and notify about new work."""

__version__ = "0.4.0"
