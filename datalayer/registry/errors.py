"""Exceptions raised while loading and registering schema definitions."""

from pathlib import Path
from typing import Optional, Union


class DataLayerError(Exception):
    """Base class for every fatal model registration failure."""
    pass


class LoadError(DataLayerError):
    """Raised when the models directory or a definition file cannot be loaded."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"Cannot load {self.path}: {message}")


class RegistrationError(DataLayerError):
    """Raised when a schema definition fails to register."""

    def __init__(self, name: Optional[str], message: str):
        self.name = name
        self.message = message
        super().__init__(f"Cannot define model {name!r}: {message}")
