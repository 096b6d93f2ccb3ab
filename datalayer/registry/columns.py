"""Translation of declared column specs into SQLAlchemy columns."""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    LargeBinary,
    Numeric,
    String,
    Text,
)
from sqlalchemy.types import TypeEngine

# Lower-cased type names accepted in JSON definitions
TYPE_NAMES: Dict[str, type] = {
    "string": String,
    "varchar": String,
    "text": Text,
    "integer": Integer,
    "int": Integer,
    "bigint": BigInteger,
    "biginteger": BigInteger,
    "float": Float,
    "double": Float,
    "numeric": Numeric,
    "decimal": Numeric,
    "boolean": Boolean,
    "bool": Boolean,
    "date": Date,
    "datetime": DateTime,
    "json": JSON,
    "binary": LargeBinary,
    "blob": LargeBinary,
}

COLUMN_KEYWORDS = ("nullable", "primary_key", "unique", "index", "default", "autoincrement", "comment")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """``BlogPost`` -> ``blog_post``."""
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").replace(" ", "_").lower()


def resolve_type(type_spec: Any, length: Any = None) -> TypeEngine:
    """Resolve a type name, SQLAlchemy type class or type instance."""
    if isinstance(type_spec, TypeEngine):
        return type_spec
    if isinstance(type_spec, type) and issubclass(type_spec, TypeEngine):
        type_class = type_spec
    elif isinstance(type_spec, str) and type_spec.strip().lower() in TYPE_NAMES:
        type_class = TYPE_NAMES[type_spec.strip().lower()]
    else:
        raise ValueError(
            f"Unknown column type {type_spec!r}. Use a SQLAlchemy type or one of: "
            f"{', '.join(sorted(TYPE_NAMES))}"
        )

    if length is not None:
        if not issubclass(type_class, String):
            raise ValueError(f"length is only valid for string columns, not {type_class.__name__}")
        return type_class(length)
    return type_class()


def build_column(column_name: str, spec: Any) -> Column:
    """Build a Column from one entry of a definition's ``columns`` mapping.

    Raises:
        ValueError: If the spec is not a recognised type or column mapping.
    """
    if not isinstance(column_name, str) or not column_name:
        raise ValueError(f"Column names must be non-empty strings, got {column_name!r}")

    if isinstance(spec, Mapping):
        if "type" not in spec:
            raise ValueError(f"Column {column_name!r} is missing a type")
        unknown = set(spec) - set(COLUMN_KEYWORDS) - {"type", "length"}
        if unknown:
            raise ValueError(f"Column {column_name!r} has unknown option(s): {', '.join(sorted(unknown))}")
        kwargs = {key: spec[key] for key in COLUMN_KEYWORDS if key in spec}
        return Column(column_name, resolve_type(spec["type"], spec.get("length")), **kwargs)

    return Column(column_name, resolve_type(spec))


def build_columns(columns: Any) -> List[Column]:
    """Build all columns of a definition, adding an ``id`` primary key when none is declared."""
    if not isinstance(columns, Mapping):
        raise ValueError(f"columns must be a mapping of column name to type, got {type(columns).__name__}")
    if not columns:
        raise ValueError("columns must declare at least one column")

    built = [build_column(name, spec) for name, spec in columns.items()]

    if not any(column.primary_key for column in built):
        if any(column.name == "id" for column in built):
            raise ValueError("column 'id' is declared but no column is marked primary_key")
        built.insert(0, Column("id", Integer, primary_key=True, autoincrement=True))
    return built


def timestamp_columns() -> List[Column]:
    return [
        Column("created_at", DateTime, default=datetime.utcnow, nullable=False),
        Column("updated_at", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False),
    ]


def pluralize(word: str) -> str:
    """Naive English plural used for default table and collection names."""
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if len(word) > 1 and word.endswith("y") and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"
