"""Get a bearer token from certificate or managed identity authentication."""

__version__ = "1.1.0"
