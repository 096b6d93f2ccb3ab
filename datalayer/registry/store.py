"""Central model registry backed by SQLAlchemy imperative mapping.

A ``Registry`` owns one ``MetaData`` and one ``sqlalchemy.orm.registry``. Each
defined schema becomes a ``Table`` plus a generated ``Entity`` subclass mapped
onto it, wrapped in a ``RegisteredSchema`` handle. Associations are added to
already-mapped classes as foreign key columns and ``relationship()``
properties, so they can be applied in any order once both sides exist.

The registry is not thread-safe; callers own it and must serialize access.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import (
    Column,
    Engine,
    ForeignKey,
    ForeignKeyConstraint,
    MetaData,
    Table,
    inspect,
)
from sqlalchemy.orm import Mapper, registry as orm_registry, relationship

from datalayer.logging_config import get_logger
from datalayer.registry.columns import build_columns, pluralize, snake_case, timestamp_columns
from datalayer.registry.definitions import AssociationType

logger = get_logger(name=__name__)

_RELATIONSHIP_KEYS = {"as", "foreign_key", "back_populates", "backref", "cascade"}

ALLOWED_CONFIG_KEYS = {
    AssociationType.ONE_TO_ONE: _RELATIONSHIP_KEYS | {"on_delete", "nullable"},
    AssociationType.ONE_TO_MANY: _RELATIONSHIP_KEYS | {"on_delete", "nullable"},
    AssociationType.BELONGS_TO: _RELATIONSHIP_KEYS | {"on_delete", "nullable"},
    AssociationType.MANY_TO_MANY: _RELATIONSHIP_KEYS | {"through", "other_key"},
}


class Entity:
    """Base class for every mapped class generated by the registry."""

    __schema_name__: str = ""

    def __init__(self, **kwargs: Any):
        cls = type(self)
        for key, value in kwargs.items():
            if not hasattr(cls, key):
                raise TypeError(f"{key!r} is an invalid keyword argument for {cls.__name__}")
            setattr(self, key, value)

    def __repr__(self) -> str:
        identity = inspect(self).identity
        return f"<{type(self).__name__}(identity={identity})>"


@dataclass(frozen=True)
class AppliedAssociation:
    """An association established on a source schema."""
    type: AssociationType
    target: "RegisteredSchema"
    attribute: str
    config: Mapping[str, Any] = field(default_factory=dict)


class RegisteredSchema:
    """Handle for a defined schema, exposing the association operations."""

    def __init__(self, registry: "Registry", name: str, mapped_class: type, table: Table, options: Mapping[str, Any]):
        self.registry = registry
        self.name = name
        self.mapped_class = mapped_class
        self.table = table
        self.options = options
        self.associations: List[AppliedAssociation] = []

    @property
    def mapper(self) -> Mapper:
        return inspect(self.mapped_class)

    @property
    def primary_key(self) -> Column:
        """The single primary key column other schemas reference."""
        columns = list(self.table.primary_key.columns)
        if len(columns) != 1:
            raise ValueError(
                f"{self.name} has a composite primary key "
                f"({', '.join(c.name for c in columns)}) and cannot be referenced"
            )
        return columns[0]

    @property
    def default_key_name(self) -> str:
        """Foreign key name used by other tables pointing at this schema, e.g. ``user_id``."""
        return f"{snake_case(self.name)}_{self.primary_key.name}"

    def establish(self, association_type: AssociationType, target: "RegisteredSchema",
                  config: Optional[Mapping[str, Any]] = None) -> AppliedAssociation:
        """Dispatch to the operation matching ``association_type``."""
        operations: Dict[AssociationType, Callable[..., AppliedAssociation]] = {
            AssociationType.ONE_TO_ONE: self.one_to_one,
            AssociationType.ONE_TO_MANY: self.one_to_many,
            AssociationType.BELONGS_TO: self.belongs_to,
            AssociationType.MANY_TO_MANY: self.many_to_many,
        }
        return operations[AssociationType(association_type)](target, config)

    def belongs_to(self, target: "RegisteredSchema", config: Optional[Mapping[str, Any]] = None) -> AppliedAssociation:
        """Foreign key on this table pointing at ``target``; scalar relationship."""
        cfg = self._check_config(AssociationType.BELONGS_TO, config)
        target_pk = target.primary_key
        fk_name = cfg.get("foreign_key", target.default_key_name)
        attribute = cfg.get("as", snake_case(target.name))

        fk_column = self._plan_foreign_key(self, fk_name, target_pk, cfg)
        self._check_attribute(attribute, reserved=(fk_name,))

        kwargs = self._relationship_kwargs(cfg)
        kwargs["foreign_keys"] = [fk_column]
        if target is self:
            kwargs["remote_side"] = [target_pk]
        prop = relationship(target.mapped_class, **kwargs)

        self._attach_foreign_key(self, fk_column, target_pk, cfg)
        self.mapper.add_property(attribute, prop)
        return self._record(AssociationType.BELONGS_TO, target, attribute, cfg)

    def one_to_one(self, target: "RegisteredSchema", config: Optional[Mapping[str, Any]] = None) -> AppliedAssociation:
        """Foreign key on ``target`` pointing back here; scalar relationship."""
        return self._has_one_or_many(AssociationType.ONE_TO_ONE, target, config)

    def one_to_many(self, target: "RegisteredSchema", config: Optional[Mapping[str, Any]] = None) -> AppliedAssociation:
        """Foreign key on ``target`` pointing back here; collection relationship."""
        return self._has_one_or_many(AssociationType.ONE_TO_MANY, target, config)

    def many_to_many(self, target: "RegisteredSchema", config: Optional[Mapping[str, Any]] = None) -> AppliedAssociation:
        """Join table between this schema and ``target``; collection relationship.

        The default join table name is the two table names in sorted order,
        so declaring the reverse side reuses the table created by whichever
        side was applied first.
        """
        cfg = self._check_config(AssociationType.MANY_TO_MANY, config)
        source_pk = self.primary_key
        target_pk = target.primary_key
        source_key = cfg.get("foreign_key", self.default_key_name)
        target_key = cfg.get("other_key", target.default_key_name)
        if source_key == target_key:
            raise ValueError(
                f"join table keys must differ; set foreign_key and other_key (both are {source_key!r})"
            )

        through = cfg.get("through", "_".join(sorted((self.table.name, target.table.name))))
        if not isinstance(through, str) or not through:
            raise ValueError(f"through must be a non-empty table name, got {through!r}")
        metadata = self.registry.metadata
        existing = metadata.tables.get(through)
        if existing is not None:
            missing = [key for key in (source_key, target_key) if key not in existing.c]
            if missing:
                raise ValueError(f"join table {through!r} has no column(s) {', '.join(missing)}")

        attribute = cfg.get("as", pluralize(snake_case(target.name)))
        self._check_attribute(attribute)

        join_table = existing
        if join_table is None:
            join_table = Table(
                through,
                metadata,
                Column(source_key, source_pk.type, ForeignKey(source_pk, ondelete="CASCADE"), primary_key=True),
                Column(target_key, target_pk.type, ForeignKey(target_pk, ondelete="CASCADE"), primary_key=True),
            )

        kwargs = self._relationship_kwargs(cfg)
        kwargs["secondary"] = join_table
        kwargs["primaryjoin"] = source_pk == join_table.c[source_key]
        kwargs["secondaryjoin"] = target_pk == join_table.c[target_key]
        try:
            prop = relationship(target.mapped_class, **kwargs)
        except Exception:
            if existing is None:
                metadata.remove(join_table)
            raise

        self.mapper.add_property(attribute, prop)
        return self._record(AssociationType.MANY_TO_MANY, target, attribute, cfg)

    def _has_one_or_many(self, association_type: AssociationType, target: "RegisteredSchema",
                         config: Optional[Mapping[str, Any]]) -> AppliedAssociation:
        cfg = self._check_config(association_type, config)
        source_pk = self.primary_key
        fk_name = cfg.get("foreign_key", self.default_key_name)
        if association_type is AssociationType.ONE_TO_ONE:
            attribute = cfg.get("as", snake_case(target.name))
        else:
            attribute = cfg.get("as", pluralize(snake_case(target.name)))

        fk_column = self._plan_foreign_key(target, fk_name, source_pk, cfg)
        self._check_attribute(attribute, reserved=(fk_name,) if target is self else ())

        kwargs = self._relationship_kwargs(cfg)
        kwargs["foreign_keys"] = [fk_column]
        if association_type is AssociationType.ONE_TO_ONE:
            kwargs["uselist"] = False
        prop = relationship(target.mapped_class, **kwargs)

        self._attach_foreign_key(target, fk_column, source_pk, cfg)
        self.mapper.add_property(attribute, prop)
        return self._record(association_type, target, attribute, cfg)

    def _check_config(self, association_type: AssociationType, config: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        cfg = dict(config or {})
        unknown = set(cfg) - ALLOWED_CONFIG_KEYS[association_type]
        if unknown:
            raise ValueError(
                f"unknown {association_type.value} option(s): {', '.join(sorted(unknown))}"
            )
        return cfg

    def _check_attribute(self, attribute: Any, reserved: Tuple[str, ...] = ()) -> None:
        """Reject a relationship name that is empty or already taken on this schema."""
        if not isinstance(attribute, str) or not attribute:
            raise ValueError(f"relationship name must be a non-empty string, got {attribute!r}")
        if self.mapper.has_property(attribute) or attribute in self.table.c or attribute in reserved:
            raise ValueError(f"{self.name} already has an attribute named {attribute!r}")

    @staticmethod
    def _relationship_kwargs(cfg: Mapping[str, Any]) -> Dict[str, Any]:
        return {key: cfg[key] for key in ("back_populates", "backref", "cascade") if key in cfg}

    @staticmethod
    def _plan_foreign_key(holder: "RegisteredSchema", column_name: Any, referenced: Column,
                          cfg: Mapping[str, Any]) -> Column:
        """Return ``holder``'s foreign key column to ``referenced`` without modifying anything.

        A column already declared on the table is returned as is; otherwise a
        new, unattached column is built for ``_attach_foreign_key``.
        """
        if not isinstance(column_name, str) or not column_name:
            raise ValueError(f"foreign_key must be a non-empty column name, got {column_name!r}")
        if column_name in holder.table.c:
            return holder.table.c[column_name]
        if holder.mapper.has_property(column_name):
            raise ValueError(f"{holder.name} already has an attribute named {column_name!r}")

        return Column(
            column_name,
            referenced.type,
            ForeignKey(referenced, ondelete=cfg.get("on_delete")),
            nullable=cfg.get("nullable", True),
            index=True,
        )

    @staticmethod
    def _attach_foreign_key(holder: "RegisteredSchema", column: Column, referenced: Column,
                            cfg: Mapping[str, Any]) -> None:
        """Add a planned column to ``holder``, or give a declared column its constraint."""
        table = holder.table
        if column.name not in table.c:
            table.append_column(column)
            holder.mapper.add_property(column.name, column)
        elif not column.foreign_keys:
            table.append_constraint(ForeignKeyConstraint([column], [referenced], ondelete=cfg.get("on_delete")))

    def _record(self, association_type: AssociationType, target: "RegisteredSchema",
                attribute: str, cfg: Mapping[str, Any]) -> AppliedAssociation:
        applied = AppliedAssociation(type=association_type, target=target, attribute=attribute, config=cfg)
        self.associations.append(applied)
        return applied

    def __repr__(self) -> str:
        return f"<RegisteredSchema(name='{self.name}', table='{self.table.name}')>"


class Registry:
    """Name -> RegisteredSchema store with its own MetaData and ORM registry."""

    def __init__(self, metadata: Optional[MetaData] = None):
        self.metadata = metadata if metadata is not None else MetaData()
        self._orm = orm_registry(metadata=self.metadata)
        self._schemas: Dict[str, RegisteredSchema] = {}

    def define(self, name: str, columns: Any, options: Optional[Mapping[str, Any]] = None) -> RegisteredSchema:
        """Create the table and mapped class for a schema.

        Raises:
            ValueError: If the name is empty or taken, or the columns/options are malformed.
            sqlalchemy.exc.SQLAlchemyError: If SQLAlchemy rejects the table or mapping.
        """
        if not isinstance(name, str) or not name:
            raise ValueError(f"model name must be a non-empty string, got {name!r}")
        if name in self._schemas:
            raise ValueError(f"model {name!r} is already defined")

        options = options if options is not None else {}
        if not isinstance(options, Mapping):
            raise ValueError(f"options must be a mapping, got {type(options).__name__}")

        table_name = options.get("table_name") or pluralize(snake_case(name))
        if table_name in self.metadata.tables:
            raise ValueError(f"table {table_name!r} is already defined")

        table_columns = build_columns(columns)
        if options.get("timestamps"):
            declared = {column.name for column in table_columns}
            for column in timestamp_columns():
                if column.name in declared:
                    raise ValueError(f"column {column.name!r} clashes with the timestamps option")
                table_columns.append(column)

        table = Table(table_name, self.metadata, *table_columns, comment=options.get("comment"))
        mapped_class = type(name, (Entity,), {"__module__": __name__, "__schema_name__": name})
        try:
            self._orm.map_imperatively(mapped_class, table)
        except Exception:
            self.metadata.remove(table)
            raise

        schema = RegisteredSchema(self, name, mapped_class, table, options)
        self._schemas[name] = schema
        logger.debug("Mapped {} onto table {}", name, table_name)
        return schema

    def lookup(self, name: str) -> Optional[RegisteredSchema]:
        return self._schemas.get(name)

    def names(self) -> List[str]:
        return list(self._schemas)

    def configure(self) -> None:
        """Configure every mapper now instead of on first use."""
        self._orm.configure()

    def create_tables(self, engine: Engine) -> None:
        self.metadata.create_all(bind=engine)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[RegisteredSchema]:
        return iter(self._schemas.values())

    def __repr__(self) -> str:
        return f"<Registry(schemas={self.names()})>"
