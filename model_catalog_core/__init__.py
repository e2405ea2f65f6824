"""Provider credential storage and model catalog synchronization."""

__version__ = "0.1.0"
