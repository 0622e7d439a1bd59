"""Data models for entity graph."""

import dataclasses
import types
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Union, get_args, get_origin

from entity_graph.validation import RuleSet

# Fields owned by the store, never taken from client input.
SYSTEM_FIELDS = frozenset({"id", "created_at", "updated_at"})


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> Any:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


def accepted_types(annotation: Any) -> tuple[type, ...]:
    """Concrete types a field annotation accepts, ignoring None."""
    if get_origin(annotation) in (Union, types.UnionType):
        return tuple(arg for arg in get_args(annotation) if arg is not type(None))
    return (annotation,)


@dataclass(kw_only=True)
class Entity:
    """A persisted business object with a globally unique id."""

    entity_type: ClassVar[str] = "entity"
    plural: ClassVar[str] = "entities"
    rules: ClassVar[RuleSet] = RuleSet()

    id: str = field(default_factory=new_id)
    name: str = ""
    status: str = "active"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.updated_at is None:
            self.updated_at = self.created_at

    @classmethod
    def field_types(cls) -> dict[str, Any]:
        return {f.name: f.type for f in dataclasses.fields(cls)}

    @classmethod
    def field_default(cls, name: str) -> Any:
        for f in dataclasses.fields(cls):
            if f.name == name:
                if f.default_factory is not dataclasses.MISSING:
                    return f.default_factory()
                return f.default
        raise KeyError(name)

    def touched(self) -> "Entity":
        """Copy of this entity with ``updated_at`` refreshed."""
        return dataclasses.replace(self, updated_at=utcnow())

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        data["type"] = self.entity_type
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entity":
        """Rebuild an entity from its serialized form."""
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        for key in ("created_at", "updated_at"):
            if key in kwargs:
                kwargs[key] = _parse_datetime(kwargs[key])
        return cls(**kwargs)


@dataclass
class Link:
    """A directed, named relationship between two entity ids."""

    source_id: str
    target_id: str
    relation: str
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "relation": self.relation,
            "source_id": self.source_id,
            "target_id": self.target_id,
            "metadata": dict(self.metadata),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Link":
        return cls(
            id=data["id"],
            relation=data["relation"],
            source_id=data["source_id"],
            target_id=data["target_id"],
            metadata=data.get("metadata") or {},
            created_at=_parse_datetime(data["created_at"]),
        )
