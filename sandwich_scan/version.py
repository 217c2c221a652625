"""Version information for the sandwich scanner."""

__version__ = "0.3.0"
