"""Declarative validation and normalization of raw entity fields.

Rule tables are plain data, one per entity type and operation::

    {
        "create": {
            "number": {
                "required": True,
                "filters": ["trim", "uppercase"],
                "validators": [{"string_length": [3, 50]}],
            },
        },
        "update": {...},
    }

Each filter or validator is either a bare name or a one-key mapping from the
name to its arguments. Filters run first, in declared order, then validators.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
import yaml

from entity_graph.errors import ValidationError

logger = structlog.get_logger()

Filter = Callable[[Any], Any]
Validator = Callable[[Any], str | None]


class Operation(str, Enum):
    """Operation context a rule set is evaluated for."""

    CREATE = "create"
    UPDATE = "update"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Filters


def trim() -> Filter:
    return lambda value: value.strip() if isinstance(value, str) else value


def uppercase() -> Filter:
    return lambda value: value.upper() if isinstance(value, str) else value


def lowercase() -> Filter:
    return lambda value: value.lower() if isinstance(value, str) else value


def round_decimals(places: int) -> Filter:
    """Round half away from zero to ``places`` decimals."""
    quantum = Decimal(1).scaleb(-int(places))

    def apply(value: Any) -> Any:
        if not _is_number(value):
            return value
        return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))

    return apply


# Validators return None when the value is accepted, otherwise the reason.


def string_length(min_length: int, max_length: int) -> Validator:
    def check(value: Any) -> str | None:
        if not isinstance(value, str):
            return "expected a string"
        if not min_length <= len(value) <= max_length:
            return f"length must be between {min_length} and {max_length}"
        return None

    return check


def positive() -> Validator:
    def check(value: Any) -> str | None:
        if not _is_number(value):
            return "expected a number"
        if value <= 0:
            return "must be positive"
        return None

    return check


def max_value(limit: float) -> Validator:
    def check(value: Any) -> str | None:
        if not _is_number(value):
            return "expected a number"
        if value > limit:
            return f"must not exceed {limit}"
        return None

    return check


def in_list(*allowed: str) -> Validator:
    def check(value: Any) -> str | None:
        if value not in allowed:
            return f"must be one of: {', '.join(allowed)}"
        return None

    return check


def date_format(pattern: str) -> Validator:
    def check(value: Any) -> str | None:
        if not isinstance(value, str):
            return "expected a string"
        try:
            datetime.strptime(value, pattern)
        except ValueError:
            return f"must match date format {pattern}"
        return None

    return check


FILTERS: dict[str, Callable[..., Filter]] = {
    "trim": trim,
    "uppercase": uppercase,
    "lowercase": lowercase,
    "round_decimals": round_decimals,
}

VALIDATORS: dict[str, Callable[..., Validator]] = {
    "string_length": string_length,
    "positive": positive,
    "max_value": max_value,
    "in_list": in_list,
    "date_format": date_format,
}


def _build(declaration: Any, factories: Mapping[str, Callable[..., Any]], kind: str) -> Callable[[Any], Any]:
    """Instantiate one filter or validator from its declaration."""
    if isinstance(declaration, str):
        name, args = declaration, []
    elif isinstance(declaration, Mapping) and len(declaration) == 1:
        name, raw_args = next(iter(declaration.items()))
        args = list(raw_args) if isinstance(raw_args, (list, tuple)) else [raw_args]
    else:
        raise ValueError(f"Invalid {kind} declaration: {declaration!r}")

    if name not in factories:
        raise ValueError(f"Unknown {kind}: '{name}'. Supported: {sorted(factories)}")
    return factories[name](*args)


@dataclass
class FieldRule:
    """Filters and validators declared for one field under one operation."""

    name: str
    required: bool = False
    filters: list[Filter] = field(default_factory=list)
    validators: list[Validator] = field(default_factory=list)

    @classmethod
    def from_dict(cls, name: str, declaration: Mapping[str, Any]) -> "FieldRule":
        return cls(
            name=name,
            required=bool(declaration.get("required", False)),
            filters=[_build(item, FILTERS, "filter") for item in declaration.get("filters") or []],
            validators=[_build(item, VALIDATORS, "validator") for item in declaration.get("validators") or []],
        )

    def apply(self, value: Any) -> Any:
        """Filter then validate a present value, returning the normalized value."""
        for apply_filter in self.filters:
            value = apply_filter(value)
        for validate in self.validators:
            reason = validate(value)
            if reason is not None:
                raise ValidationError(self.name, reason)
        return value


class RuleSet:
    """Create and update rule tables for one entity type."""

    def __init__(
        self,
        create: Mapping[str, FieldRule] | None = None,
        update: Mapping[str, FieldRule] | None = None,
    ) -> None:
        self.rules: dict[Operation, dict[str, FieldRule]] = {
            Operation.CREATE: dict(create or {}),
            Operation.UPDATE: dict(update or {}),
        }

    @classmethod
    def from_dict(cls, table: Mapping[str, Any]) -> "RuleSet":
        """Build a rule set from its plain-data declaration."""
        unknown = set(table) - {op.value for op in Operation}
        if unknown:
            raise ValueError(f"Unknown operation(s) in rule table: {sorted(unknown)}")

        parsed: dict[str, dict[str, FieldRule]] = {}
        for operation in Operation:
            fields = table.get(operation.value) or {}
            parsed[operation.value] = {
                name: FieldRule.from_dict(name, declaration or {}) for name, declaration in fields.items()
            }
        return cls(create=parsed["create"], update=parsed["update"])

    def fields(self, operation: Operation) -> dict[str, FieldRule]:
        return self.rules[Operation(operation)]

    def validate_and_filter(self, operation: Operation | str, raw: Mapping[str, Any]) -> dict[str, Any]:
        """Apply the rules for ``operation`` to ``raw``.

        Returns a new dict holding every input key, with ruled fields replaced by
        their filtered values. Raises ValidationError on the first rejected field,
        so callers never see a partially normalized result.
        """
        operation = Operation(operation)
        normalized = dict(raw)

        for name, rule in self.rules[operation].items():
            value = raw.get(name)
            if value is None:
                if rule.required:
                    logger.debug("Required field missing", field=name, operation=operation.value)
                    raise ValidationError(name, "missing field")
                continue
            normalized[name] = rule.apply(value)

        return normalized


def load_rule_tables(path: str | Path) -> dict[str, RuleSet]:
    """Load rule sets keyed by entity type from a YAML file."""
    path = Path(path)
    try:
        with open(path, "r") as f:
            document = yaml.safe_load(f) or {}
    except Exception as e:
        logger.error("Failed to load rule tables", path=str(path), error=str(e))
        raise ValueError(f"Failed to load rule tables from {path}: {e}") from e

    if not isinstance(document, Mapping):
        raise ValueError(f"Rule tables in {path} must be a mapping of entity type to rules")

    tables = {entity_type: RuleSet.from_dict(table or {}) for entity_type, table in document.items()}
    logger.debug("Rule tables loaded", path=str(path), entity_types=list(tables))
    return tables
