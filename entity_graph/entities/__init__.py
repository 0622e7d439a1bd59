"""Concrete entity types."""

from entity_graph.entities.billing import Invoice, Order, Payment
from entity_graph.entities.catalog import Category, Product, Tag
from entity_graph.entities.inventory import Activity, StockItem, StockMovement, Store, Usage, Warehouse
from entity_graph.models import Entity

ENTITY_TYPES: dict[str, type[Entity]] = {
    cls.entity_type: cls
    for cls in (
        Order,
        Invoice,
        Payment,
        Product,
        Category,
        Tag,
        Activity,
        StockItem,
        StockMovement,
        Store,
        Usage,
        Warehouse,
    )
}

__all__ = [
    "ENTITY_TYPES",
    "Activity",
    "Category",
    "Invoice",
    "Order",
    "Payment",
    "Product",
    "StockItem",
    "StockMovement",
    "Store",
    "Tag",
    "Usage",
    "Warehouse",
]
