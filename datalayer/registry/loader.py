"""Loader for schema definition files.

Every entry of the models directory is one definition unit:
- ``<name>.json``: a JSON object with name, columns, options and associations
- ``<name>.py``: a module exposing ``get_definition()`` or a ``DEFINITION`` mapping

Entries are returned in the order the directory listing yields them. The
loader only deserializes; it does not check that names or columns make sense.
"""
import importlib.util
import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, List, Sequence, Union

from datalayer.logging_config import get_logger
from datalayer.registry.definitions import SchemaDefinition
from datalayer.registry.diagnostics import SILENT, Diagnostics
from datalayer.registry.errors import LoadError

logger = get_logger(name=__name__)

SUPPORTED_SUFFIXES = (".json", ".py")

ListEntries = Callable[[Path], Sequence[str]]
LoadEntry = Callable[[Path], SchemaDefinition]


def is_definition_entry(entry_name: str) -> bool:
    """Hidden files, ``__init__.py`` and ``__pycache__`` are not definitions."""
    return not entry_name.startswith((".", "_"))


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise LoadError(path, f"unreadable file ({e})") from e
    except UnicodeDecodeError as e:
        raise LoadError(path, f"not UTF-8 text ({e.reason} at byte {e.start})") from e
    except json.JSONDecodeError as e:
        raise LoadError(path, f"invalid JSON at line {e.lineno}: {e.msg}") from e


def _load_module(path: Path) -> Any:
    module_name = f"datalayer_models_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise LoadError(path, "not an importable Python module")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise LoadError(path, f"import failed ({type(e).__name__}: {e})") from e

    if hasattr(module, "get_definition"):
        try:
            return module.get_definition()
        except Exception as e:
            raise LoadError(path, f"get_definition() failed ({type(e).__name__}: {e})") from e
    if hasattr(module, "DEFINITION"):
        return module.DEFINITION
    raise LoadError(path, "module defines neither get_definition() nor DEFINITION")


def load_definition_file(path: Union[str, Path]) -> SchemaDefinition:
    """Load a single definition unit.

    Raises:
        LoadError: If the file type is unsupported, the file cannot be read or
            deserialized, or it does not produce a mapping.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = _load_json(path)
    elif suffix == ".py":
        data = _load_module(path)
    else:
        raise LoadError(
            path,
            f"unsupported definition type {suffix or '(none)'!r}; expected one of {', '.join(SUPPORTED_SUFFIXES)}",
        )

    if not isinstance(data, Mapping):
        raise LoadError(path, f"definition must be a mapping, got {type(data).__name__}")

    return SchemaDefinition.from_mapping(data, source=path)


def get_definition_paths(
    models_dir: Union[str, Path],
    list_entries: ListEntries = os.listdir,
) -> List[Path]:
    """List definition files under ``models_dir`` in listing order."""
    dir_path = Path(os.path.normpath(models_dir))
    try:
        entry_names = list(list_entries(dir_path))
    except OSError as e:
        raise LoadError(dir_path, f"cannot list directory ({e.strerror or e})") from e

    return [dir_path / name for name in entry_names if is_definition_entry(name)]


def load_definitions(
    models_dir: Union[str, Path],
    list_entries: ListEntries = os.listdir,
    load_entry: LoadEntry = load_definition_file,
    diagnostics: Diagnostics = SILENT,
) -> List[SchemaDefinition]:
    """Load every definition unit in ``models_dir``.

    Args:
        models_dir: Directory holding one definition unit per model.
        list_entries: Directory listing capability; its order is preserved.
        load_entry: Definition loading capability for a single path.
        diagnostics: Verbosity-gated diagnostics sink.

    Returns:
        Definitions in listing order.

    Raises:
        LoadError: If the directory cannot be listed or any entry fails to load.
    """
    definitions = []
    for path in get_definition_paths(models_dir, list_entries):
        diagnostics.emit("LOADING {}", path.name)
        try:
            definitions.append(load_entry(path))
        except LoadError:
            raise
        except Exception as e:
            raise LoadError(path, f"{type(e).__name__}: {e}") from e

    logger.debug("Loaded {} schema definition(s) from {}", len(definitions), models_dir)
    return definitions
