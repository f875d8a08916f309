"""Event ticketing and booking platform."""

__version__ = "1.0.0"
