"""Schema and association declarations as loaded from the models directory."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple


class AssociationType(str, Enum):
    """Relationship kinds a schema may declare towards another schema."""

    ONE_TO_ONE = "OneToOne"
    ONE_TO_MANY = "OneToMany"
    BELONGS_TO = "BelongsTo"
    MANY_TO_MANY = "ManyToMany"

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)


@dataclass(frozen=True)
class AssociationSpec:
    """A validated association declaration."""

    type: AssociationType
    target_name: str
    config: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "AssociationSpec":
        """Build a spec from a declaration that already passed validation."""
        return cls(
            type=AssociationType(raw["type"]),
            target_name=raw["target_name"],
            config=dict(raw.get("config") or {}),
        )


@dataclass(frozen=True)
class SchemaDefinition:
    """One model as declared in a definition file.

    ``associations`` holds the raw declarations in declaration order; they are
    validated by the resolver, not here.
    """

    name: str
    columns: Mapping[str, Any]
    options: Mapping[str, Any] = field(default_factory=dict)
    associations: Tuple[Any, ...] = ()
    source: Optional[Path] = None

    @property
    def has_associations(self) -> bool:
        return len(self.associations) > 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], source: Optional[Path] = None) -> "SchemaDefinition":
        """Build a definition from a deserialized definition unit.

        Only the shape of the container is normalised; missing ``name`` or
        ``columns`` surface later, when the registrar defines the model.
        """
        associations = data.get("associations") or ()
        if isinstance(associations, (list, tuple)):
            associations = tuple(associations)
        else:
            # A non-sequence is a single malformed declaration for the resolver to reject
            associations = (associations,)

        return cls(
            name=data.get("name", ""),
            columns=data.get("columns") or {},
            options=data.get("options") or {},
            associations=associations,
            source=source,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": self.columns,
            "options": self.options,
            "associations": list(self.associations),
            "source": str(self.source) if self.source else None,
        }
