"""Profile completion scoring."""

__version__ = "0.1.0"
