"""Public entry point: load, register and associate every model in a directory."""

from pathlib import Path
from typing import Union

from datalayer.logging_config import get_logger
from datalayer.registry.diagnostics import Diagnostics
from datalayer.registry.loader import load_definitions
from datalayer.registry.registrar import register_all
from datalayer.registry.report import AssociationReport
from datalayer.registry.resolver import resolve_all
from datalayer.registry.store import Registry

logger = get_logger(name=__name__)


def define_models(registry: Registry, models_dir: Union[str, Path], verbose: bool = False) -> AssociationReport:
    """Define every model under ``models_dir`` on ``registry`` and wire their associations.

    Args:
        registry: Registry to populate. Callers own it and may reuse it.
        models_dir: Directory holding one definition unit per model.
        verbose: Emit a diagnostic line for every decision. Lines go through
            loguru; call ``configure_logging()`` first to have them printed bare
            on stdout, as the command line script does. Without it they reach
            whatever handlers the process installed, by default loguru's stderr one.

    Returns:
        One outcome per association declaration.

    Raises:
        LoadError: If the directory or a definition cannot be loaded.
        RegistrationError: If a schema cannot be defined.
    """
    diagnostics = Diagnostics(verbose=verbose)

    definitions = load_definitions(models_dir, diagnostics=diagnostics)
    register_all(registry, definitions, diagnostics)
    report = resolve_all(registry, definitions, diagnostics)

    logger.info(
        "Defined {} model(s) from {}: {} association(s) applied, {} skipped",
        len(definitions),
        models_dir,
        len(report.applied),
        len(report.skipped),
    )
    return report
