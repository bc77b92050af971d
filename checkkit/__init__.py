"""CheckKit routine tracking core."""

__version__ = "1.0.0"
