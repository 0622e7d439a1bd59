"""Catalog entities: products, categories and tags."""

from dataclasses import dataclass
from typing import ClassVar

from entity_graph.models import Entity
from entity_graph.validation import RuleSet


def _length(min_length: int, max_length: int, required: bool, filters: list | None = None) -> dict:
    return {
        "required": required,
        "filters": filters or [],
        "validators": [{"string_length": [min_length, max_length]}],
    }


def _status(values: list[str], required: bool) -> dict:
    return {"required": required, "filters": ["trim", "lowercase"], "validators": [{"in_list": values}]}


PRODUCT_STATUSES = ["active", "inactive", "discontinued"]
CATEGORY_STATUSES = ["active", "inactive"]
PRICE = {"filters": [{"round_decimals": 2}], "validators": ["positive", {"max_value": 1_000_000.0}]}


@dataclass(kw_only=True)
class Product(Entity):
    entity_type: ClassVar[str] = "product"
    plural: ClassVar[str] = "products"
    rules: ClassVar[RuleSet] = RuleSet.from_dict(
        {
            "create": {
                "sku": _length(3, 50, required=True, filters=["trim", "uppercase"]),
                "price": {"required": True, **PRICE},
                "status": _status(PRODUCT_STATUSES, required=True),
            },
            "update": {
                "price": PRICE,
                "status": _status(PRODUCT_STATUSES, required=False),
            },
        }
    )

    name: str = "Product"
    sku: str = "SKU-000"
    price: float = 0.0
    stock_quantity: int = 0
    description: str | None = None


@dataclass(kw_only=True)
class Category(Entity):
    entity_type: ClassVar[str] = "category"
    plural: ClassVar[str] = "categories"
    rules: ClassVar[RuleSet] = RuleSet.from_dict(
        {
            "create": {
                "name": _length(2, 100, required=True),
                "slug": _length(2, 100, required=True, filters=["trim", "lowercase"]),
                "status": _status(CATEGORY_STATUSES, required=True),
            },
            "update": {
                "name": _length(2, 100, required=False),
                "slug": _length(2, 100, required=False, filters=["trim", "lowercase"]),
                "status": _status(CATEGORY_STATUSES, required=False),
            },
        }
    )

    name: str = "Category"
    slug: str = "category"
    description: str | None = None


@dataclass(kw_only=True)
class Tag(Entity):
    entity_type: ClassVar[str] = "tag"
    plural: ClassVar[str] = "tags"
    rules: ClassVar[RuleSet] = RuleSet.from_dict(
        {
            "create": {
                "name": _length(2, 50, required=True, filters=["trim", "lowercase"]),
                "color": {"filters": ["trim", "uppercase"]},
            },
            "update": {
                "name": _length(2, 50, required=False, filters=["trim", "lowercase"]),
                "color": {"filters": ["trim", "uppercase"]},
            },
        }
    )

    name: str = "tag"
    color: str | None = None
    description: str | None = None
