"""AgroLink harvest schedule front-end service."""

__version__ = "0.1.0"
