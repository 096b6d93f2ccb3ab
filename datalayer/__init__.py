"""Data-layer model registration built on SQLAlchemy."""

__version__ = "0.1.0"
