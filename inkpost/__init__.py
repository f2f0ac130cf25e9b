"""inkpost - blog media and comment services."""

__version__ = "0.1.0"
