"""Verbosity-gated diagnostics shared by the loader, registrar and resolver."""

from typing import Any

from datalayer.logging_config import get_logger

logger = get_logger(name=__name__)


class Diagnostics:
    """Emits one human-readable line per registration decision when verbose.

    Records carry ``diagnostics=True`` so ``configure_logging()`` can route
    them to the stdout sink.
    """

    def __init__(self, verbose: bool = False, component: str = "datalayer"):
        self.verbose = verbose
        self._logger = logger.bind(component=component, diagnostics=True)

    def emit(self, message: str, *args: Any) -> None:
        if self.verbose:
            self._logger.opt(depth=1).info(message, *args)

    def blank(self) -> None:
        """Blank line between groups of diagnostics."""
        self.emit("")

    def __repr__(self) -> str:
        return f"<Diagnostics(verbose={self.verbose})>"


SILENT = Diagnostics(verbose=False)
