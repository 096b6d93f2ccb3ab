"""Structural validation of association declarations.

Validation only looks at the declaration itself. It never consults the
registry, so a declaration pointing at an unknown schema is still valid here;
that case is handled by the resolver.
"""

from collections.abc import Mapping
from typing import Any, Optional

from datalayer.registry.definitions import AssociationType
from datalayer.registry.diagnostics import SILENT, Diagnostics


def check_association(spec: Any) -> Optional[str]:
    """Return why ``spec`` is not a valid association declaration, or None."""
    if spec is None or not isinstance(spec, Mapping):
        return "Invalid association specification. Associations must be mappings."

    association_type = spec.get("type")
    if not (
        isinstance(association_type, str)
        and association_type
        and association_type in AssociationType.names()
    ):
        return "Invalid association type. Must be one of: {}".format(
            ", ".join(AssociationType.names())
        )

    target_name = spec.get("target_name")
    if not (isinstance(target_name, str) and target_name):
        return "Missing target model name."

    if "config" in spec and (spec["config"] is None or not isinstance(spec["config"], Mapping)):
        return "Invalid association config. config must be a mapping of relationship options."

    return None


def validate_association(spec: Any, diagnostics: Diagnostics = SILENT) -> bool:
    """Check an association declaration, emitting a diagnostic when it is rejected."""
    reason = check_association(spec)
    if reason is not None:
        diagnostics.emit("    {}", reason)
        return False
    return True
