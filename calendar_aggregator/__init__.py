"""Calendar Aggregator - merges Google Calendar feeds into one JSON view."""

__version__ = "1.0.0"
