"""Table creation for a populated registry."""
from sqlalchemy import Engine

from datalayer.logging_config import get_logger
from datalayer.registry.store import Registry

logger = get_logger(name=__name__)


def init_database(registry: Registry, engine: Engine) -> None:
    """Configure every mapper and create all registered tables."""
    registry.configure()
    registry.create_tables(engine)
    logger.info(
        "Created {} table(s) for {} model(s) on {}",
        len(registry.metadata.tables),
        len(registry),
        engine.url.render_as_string(hide_password=True),
    )
