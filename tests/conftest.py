import json
from pathlib import Path

import pytest
from loguru import logger

from datalayer.database import create_database_engine, create_session_factory
from datalayer.registry import Registry, SchemaDefinition


USER = {
    "name": "User",
    "columns": {
        "first_name": "string",
        "email": {"type": "string", "length": 255, "unique": True},
    },
    "associations": [],
}

POST = {
    "name": "Post",
    "columns": {"title": "string", "body": "text"},
    "associations": [{"type": "BelongsTo", "target_name": "User"}],
}


@pytest.fixture()
def registry():
    return Registry()


@pytest.fixture()
def user_definition():
    return SchemaDefinition.from_mapping(USER)


@pytest.fixture()
def post_definition():
    return SchemaDefinition.from_mapping(POST)


@pytest.fixture()
def models_dir(tmp_path: Path):
    """
    Returns a writer that drops JSON definitions into a temporary models directory.
    """
    directory = tmp_path / "models"
    directory.mkdir()

    def write(*definitions, **named):
        for definition in definitions:
            named[definition["name"]] = definition
        for file_stem, definition in named.items():
            (directory / f"{file_stem}.json").write_text(json.dumps(definition), encoding="utf-8")
        return directory

    return write


@pytest.fixture()
def log_messages():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture()
def database():
    engine = create_database_engine("sqlite:///:memory:", echo=False)
    yield engine, create_session_factory(engine)
    engine.dispose()
