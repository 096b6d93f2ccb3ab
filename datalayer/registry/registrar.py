"""First pass: define every schema before any association is resolved."""

from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from datalayer.registry.definitions import SchemaDefinition
from datalayer.registry.diagnostics import SILENT, Diagnostics
from datalayer.registry.errors import RegistrationError
from datalayer.registry.store import Registry


def register_definition(registry: Registry, definition: SchemaDefinition,
                        diagnostics: Diagnostics = SILENT) -> None:
    """Define one schema.

    Raises:
        RegistrationError: If the registry rejects the definition.
    """
    diagnostics.emit("DEFINING {} MODEL", definition.name)
    try:
        registry.define(definition.name, definition.columns, definition.options)
    except (ValueError, TypeError, SQLAlchemyError) as e:
        raise RegistrationError(definition.name, str(e)) from e


def register_all(registry: Registry, definitions: Iterable[SchemaDefinition],
                 diagnostics: Diagnostics = SILENT) -> None:
    """Define every schema, stopping at the first failure.

    Association resolution assumes a complete registry, so a single rejected
    definition aborts the whole pass.
    """
    for definition in definitions:
        register_definition(registry, definition, diagnostics)
    diagnostics.blank()
