"""Inventory entities: stores, activities, warehouses, stock and usage."""

from dataclasses import dataclass
from typing import ClassVar

from entity_graph.models import Entity
from entity_graph.validation import RuleSet

NAME_CREATE = {"required": True, "validators": [{"string_length": [2, 100]}]}
NAME_UPDATE = {"validators": [{"string_length": [2, 100]}]}


def _choice(values: list[str], required: bool) -> dict:
    return {"required": required, "filters": ["trim", "lowercase"], "validators": [{"in_list": values}]}


def _rules(create: dict, update: dict) -> RuleSet:
    return RuleSet.from_dict({"create": create, "update": update})


SITE_STATUSES = ["active", "inactive", "closed"]
ACTIVITY_STATUSES = ["active", "inactive"]
STOCK_STATUSES = ["available", "reserved", "out_of_stock"]
MOVEMENT_TYPES = ["in", "out", "transfer", "adjustment"]
MOVEMENT_STATUSES = ["pending", "completed", "cancelled"]
USAGE_TYPES = ["espace_utilise", "consommation", "service"]
USAGE_STATUSES = ["pending", "recorded", "billed"]


@dataclass(kw_only=True)
class Store(Entity):
    entity_type: ClassVar[str] = "store"
    plural: ClassVar[str] = "stores"
    rules: ClassVar[RuleSet] = _rules(
        {"name": NAME_CREATE, "status": _choice(SITE_STATUSES, required=True)},
        {"name": NAME_UPDATE, "status": _choice(SITE_STATUSES, required=False)},
    )

    name: str = "Store"
    address: str | None = None


@dataclass(kw_only=True)
class Activity(Entity):
    entity_type: ClassVar[str] = "activity"
    plural: ClassVar[str] = "activities"
    rules: ClassVar[RuleSet] = _rules(
        {"name": NAME_CREATE, "status": _choice(ACTIVITY_STATUSES, required=True)},
        {"name": NAME_UPDATE, "status": _choice(ACTIVITY_STATUSES, required=False)},
    )

    name: str = "Activity"
    activity_type: str | None = None
    description: str | None = None


@dataclass(kw_only=True)
class Warehouse(Entity):
    entity_type: ClassVar[str] = "warehouse"
    plural: ClassVar[str] = "warehouses"
    rules: ClassVar[RuleSet] = _rules(
        {"name": NAME_CREATE, "status": _choice(SITE_STATUSES, required=True)},
        {"name": NAME_UPDATE, "status": _choice(SITE_STATUSES, required=False)},
    )

    name: str = "Warehouse"
    location: str | None = None
    store_id: str | None = None


@dataclass(kw_only=True)
class StockItem(Entity):
    entity_type: ClassVar[str] = "stock_item"
    plural: ClassVar[str] = "stock_items"
    rules: ClassVar[RuleSet] = _rules(
        {"quantity": {"required": True}, "status": _choice(STOCK_STATUSES, required=True)},
        {"status": _choice(STOCK_STATUSES, required=False)},
    )

    name: str = "StockItem"
    status: str = "available"
    product_id: str | None = None
    quantity: int = 0
    warehouse_id: str | None = None
    reserved_quantity: int | None = None


@dataclass(kw_only=True)
class StockMovement(Entity):
    entity_type: ClassVar[str] = "stock_movement"
    plural: ClassVar[str] = "stock_movements"
    rules: ClassVar[RuleSet] = _rules(
        {
            "movement_type": _choice(MOVEMENT_TYPES, required=True),
            "quantity": {"required": True},
            "status": _choice(MOVEMENT_STATUSES, required=True),
        },
        {
            "movement_type": _choice(MOVEMENT_TYPES, required=False),
            "status": _choice(MOVEMENT_STATUSES, required=False),
        },
    )

    name: str = "StockMovement"
    status: str = "pending"
    stock_item_id: str | None = None
    movement_type: str = "in"
    quantity: int = 0
    reason: str | None = None
    activity_id: str | None = None


@dataclass(kw_only=True)
class Usage(Entity):
    entity_type: ClassVar[str] = "usage"
    plural: ClassVar[str] = "usages"
    rules: ClassVar[RuleSet] = _rules(
        {
            "usage_type": _choice(USAGE_TYPES, required=True),
            "quantity": {"required": True, "validators": ["positive"]},
            "status": _choice(USAGE_STATUSES, required=True),
        },
        {
            "usage_type": _choice(USAGE_TYPES, required=False),
            "quantity": {"validators": ["positive"]},
            "status": _choice(USAGE_STATUSES, required=False),
        },
    )

    name: str = "Usage"
    status: str = "pending"
    activity_id: str | None = None
    usage_type: str = "service"
    quantity: float = 0.0
    unit: str | None = None
    from_activity_id: str | None = None
    date: str | None = None
