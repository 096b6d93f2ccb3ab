import sys

import pytest
from loguru import logger

from datalayer.scripts.define_models import main
from datalayer.settings import Settings

from .conftest import POST, USER


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_prints_summary(models_dir, capsys):
    ghost_post = dict(POST, associations=[
        {"type": "BelongsTo", "target_name": "User"},
        {"type": "BelongsTo", "target_name": "Ghost"},
    ])
    directory = models_dir(USER, ghost_post)

    exit_code = main([str(directory), "--create-tables", "--database-url", "sqlite:///:memory:"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Defined 2 model(s)" in output
    assert "BelongsTo(User)" in output
    assert "Post[1]: Relation (Ghost) not found" in output


def test_returns_error_code_on_load_failure(tmp_path, capsys):
    assert main([str(tmp_path / "missing")]) == 1


def test_settings_read_prefixed_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DATALAYER_MODELS_DIR", str(tmp_path))
    monkeypatch.setenv("DATALAYER_VERBOSE", "true")
    monkeypatch.setenv("DATALAYER_LOG_LEVEL", " debug ")

    settings = Settings()

    assert settings.models_dir == tmp_path
    assert settings.verbose is True
    assert settings.log_level == "DEBUG"
