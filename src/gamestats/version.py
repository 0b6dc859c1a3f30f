"""Version information for gamestats."""

__version__ = "0.1.0"
