"""Second pass: wire associations between already-registered schemas.

Resolution is best-effort. A declaration that is malformed, names a schema
that was never defined, or is refused by the store is skipped and recorded in
the report; the remaining declarations, and the remaining definitions, are
still processed.
"""

from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError

from datalayer.registry.definitions import AssociationSpec, SchemaDefinition
from datalayer.registry.diagnostics import SILENT, Diagnostics
from datalayer.registry.report import AssociationOutcome, AssociationReport, AssociationStatus
from datalayer.registry.store import RegisteredSchema, Registry
from datalayer.registry.validator import check_association


def configure_associations(registry: Registry, source: RegisteredSchema, declarations: Iterable[Any],
                           report: AssociationReport, diagnostics: Diagnostics = SILENT) -> None:
    """Apply a source schema's declarations in order, recording each outcome."""
    for index, declaration in enumerate(declarations):
        reason = check_association(declaration)
        if reason is not None:
            diagnostics.emit("    {}", reason)
            report.add(AssociationOutcome(source.name, index, AssociationStatus.SKIPPED_INVALID, declaration, reason))
            continue

        spec = AssociationSpec.from_raw(declaration)
        target = registry.lookup(spec.target_name)
        if target is None:
            diagnostics.emit("    Relation ({}) not found", spec.target_name)
            report.add(AssociationOutcome(
                source.name, index, AssociationStatus.SKIPPED_TARGET_MISSING, declaration,
                f"Relation ({spec.target_name}) not found",
            ))
            continue

        diagnostics.emit("    Configuring {}({}) association", spec.type.value, spec.target_name)
        try:
            source.establish(spec.type, target, spec.config)
        except (ValueError, TypeError, SQLAlchemyError) as e:
            reason = f"{spec.type.value}({spec.target_name}) rejected: {e}"
            diagnostics.emit("    {}", reason)
            report.add(AssociationOutcome(source.name, index, AssociationStatus.SKIPPED_REJECTED, declaration, reason))
            continue
        report.add(AssociationOutcome(source.name, index, AssociationStatus.APPLIED, declaration))


def resolve_all(registry: Registry, definitions: Iterable[SchemaDefinition],
                diagnostics: Diagnostics = SILENT) -> AssociationReport:
    """Resolve the associations of every definition, in load order.

    Must run only after ``register_all`` completed for every definition,
    since any schema may be the target of any declaration.
    """
    report = AssociationReport()

    for definition in definitions:
        if not definition.has_associations:
            continue

        source = registry.lookup(definition.name)
        if source is None:
            # Registration should have defined it; treated as recoverable all the same
            diagnostics.emit("    Source ({}) not found", definition.name)
            for index, declaration in enumerate(definition.associations):
                report.add(AssociationOutcome(
                    definition.name, index, AssociationStatus.SKIPPED_SOURCE_MISSING, declaration,
                    f"Source ({definition.name}) not found",
                ))
            continue

        diagnostics.emit("CONFIGURING {} ASSOCIATIONS", definition.name)
        configure_associations(registry, source, definition.associations, report, diagnostics)
        diagnostics.blank()

    return report
