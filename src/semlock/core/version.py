"""Version information for semlock."""

__version__ = "1.0.0"
