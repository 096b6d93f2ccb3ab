"""Model registration: load schema definitions, define them, then wire associations.

Typical use from a process bootstrap step:
    from datalayer.registry import Registry, define_models
    registry = Registry()
    report = define_models(registry, "models/", verbose=True)
"""

from .bootstrap import define_models
from .definitions import AssociationSpec, AssociationType, SchemaDefinition
from .diagnostics import Diagnostics
from .errors import DataLayerError, LoadError, RegistrationError
from .loader import get_definition_paths, load_definition_file, load_definitions
from .registrar import register_all, register_definition
from .report import AssociationOutcome, AssociationReport, AssociationStatus
from .resolver import configure_associations, resolve_all
from .store import AppliedAssociation, Entity, RegisteredSchema, Registry
from .validator import check_association, validate_association

__all__ = [
    # Entry point
    "define_models",
    # Declarations
    "AssociationSpec",
    "AssociationType",
    "SchemaDefinition",
    # Store
    "Registry",
    "RegisteredSchema",
    "AppliedAssociation",
    "Entity",
    # Passes
    "load_definitions",
    "load_definition_file",
    "get_definition_paths",
    "register_all",
    "register_definition",
    "resolve_all",
    "configure_associations",
    "check_association",
    "validate_association",
    # Results and diagnostics
    "AssociationOutcome",
    "AssociationReport",
    "AssociationStatus",
    "Diagnostics",
    # Errors
    "DataLayerError",
    "LoadError",
    "RegistrationError",
]
