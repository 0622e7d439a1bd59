"""Untyped structured-data facade in front of a typed store.

Protocol adapters talk to ``EntityFacade`` with plain dicts and never see the
entity classes.
"""

import dataclasses
import types
from collections.abc import Mapping
from typing import Any, Generic, Union, get_args, get_origin

import structlog

from entity_graph.backend import DEFAULT_PAGE_SIZE, E, Store
from entity_graph.errors import ValidationError
from entity_graph.models import SYSTEM_FIELDS, accepted_types
from entity_graph.validation import Operation

logger = structlog.get_logger()

_MISSING = object()


def _allows_none(annotation: Any) -> bool:
    return get_origin(annotation) in (Union, types.UnionType) and type(None) in get_args(annotation)


def coerce(annotation: Any, value: Any) -> Any:
    """Return ``value`` shaped for ``annotation``, or _MISSING when it does not fit."""
    if value is None:
        return None if _allows_none(annotation) else _MISSING

    expected = accepted_types(annotation)
    if isinstance(value, bool) and bool not in expected:
        return _MISSING
    if float in expected and isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, expected):
        return value
    return _MISSING


class EntityFacade(Generic[E]):
    """Create, fetch and list entities of one type as plain dicts."""

    def __init__(self, store: Store[E]) -> None:
        self.store = store
        self.entity_cls = store.entity_cls

    @property
    def entity_type(self) -> str:
        return self.entity_cls.entity_type

    def _fields(self, normalized: Mapping[str, Any]) -> dict[str, tuple[Any, Any]]:
        """Pair each client-settable field present in ``normalized`` with its coerced value."""
        fields = {}
        for name, annotation in self.entity_cls.field_types().items():
            if name in SYSTEM_FIELDS or name not in normalized:
                continue
            fields[name] = (normalized[name], coerce(annotation, normalized[name]))
        return fields

    def _warn_coerced(self, name: str, raw: Any, fallback: Any) -> None:
        logger.warning(
            "Coerced malformed field to default",
            entity_type=self.entity_type,
            field=name,
            received=type(raw).__name__,
            fallback=fallback,
        )

    def build(self, raw: Mapping[str, Any]) -> E:
        """Validate, normalize and construct a new entity from raw fields."""
        if not isinstance(raw, Mapping):
            raise ValidationError("body", "expected an object")

        normalized = self.entity_cls.rules.validate_and_filter(Operation.CREATE, raw)
        kwargs = {}
        for name, (value, coerced) in self._fields(normalized).items():
            if coerced is _MISSING:
                if value is not None:
                    self._warn_coerced(name, value, self.entity_cls.field_default(name))
                continue
            kwargs[name] = coerced
        return self.entity_cls(**kwargs)

    async def create_from_json(self, raw: Mapping[str, Any]) -> dict[str, Any]:
        entity = await self.store.create(self.build(raw))
        return entity.to_dict()

    async def fetch_as_json(self, entity_id: str) -> dict[str, Any]:
        entity = await self.store.get(entity_id)
        return entity.to_dict()

    async def list_as_json(self, limit: int | None = DEFAULT_PAGE_SIZE, offset: int | None = 0) -> list[dict[str, Any]]:
        entities = await self.store.list_page(limit=limit, offset=offset)
        return [entity.to_dict() for entity in entities]

    async def update_from_json(self, entity_id: str, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Apply update rules to ``raw`` and replace the stored entity.

        Fields absent from ``raw`` keep their stored values. On any validation
        failure the stored entity is left untouched.
        """
        if not isinstance(raw, Mapping):
            raise ValidationError("body", "expected an object")

        existing = await self.store.get(entity_id)
        normalized = self.entity_cls.rules.validate_and_filter(Operation.UPDATE, raw)

        changes = {}
        for name, (value, coerced) in self._fields(normalized).items():
            if coerced is _MISSING:
                self._warn_coerced(name, value, getattr(existing, name))
                continue
            changes[name] = coerced

        updated = await self.store.update(dataclasses.replace(existing, **changes))
        return updated.to_dict()

    async def delete(self, entity_id: str) -> None:
        await self.store.delete(entity_id)
