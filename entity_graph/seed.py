"""Sample data for the billing, catalog and inventory graphs."""

from typing import Any

import structlog

from entity_graph.registry import EntityRegistry

logger = structlog.get_logger()


async def _create(registry: EntityRegistry, entity_type: str, rows: list[dict[str, Any]]) -> list[str]:
    facade = registry.facade(entity_type)
    return [(await facade.create_from_json(row))["id"] for row in rows]


async def populate_billing(registry: EntityRegistry) -> dict[str, list[str]]:
    """Two orders, three invoices, three payments, linked order → invoice → payment."""
    orders = await _create(
        registry,
        "order",
        [
            {"name": "Order 1", "status": "pending", "number": "ORD-001", "amount": 999.99,
             "customer_name": "Customer 1", "notes": "Test order 1"},
            {"name": "Order 2", "status": "paid", "number": "ORD-002", "amount": 4999.99,
             "customer_name": "Customer 2", "notes": "Test order 2"},
        ],
    )
    invoices = await _create(
        registry,
        "invoice",
        [
            {"name": "Invoice 1", "status": "draft", "number": "INV-001", "amount": 999.99, "due_date": "2025-12-31"},
            {"name": "Invoice 2", "status": "paid", "number": "INV-002", "amount": 999.99, "due_date": "2025-12-31",
             "paid_at": "2025-01-15"},
            {"name": "Invoice 3", "status": "sent", "number": "INV-003", "amount": 4999.99, "due_date": "2025-12-31"},
        ],
    )
    payments = await _create(
        registry,
        "payment",
        [
            {"name": "Payment 1", "status": "completed", "number": "PAY-001", "amount": 999.99,
             "method": "credit_card", "transaction_id": "txn_001"},
            {"name": "Payment 2", "status": "completed", "number": "PAY-002", "amount": 999.99,
             "method": "bank_transfer", "transaction_id": "txn_002"},
            {"name": "Payment 3", "status": "pending", "number": "PAY-003", "amount": 4999.99,
             "method": "credit_card", "transaction_id": "txn_003"},
        ],
    )

    await registry.link(orders[0], invoices[0], "has_invoice", {"note": "initial invoice"})
    await registry.link(orders[0], invoices[1], "has_invoice")
    await registry.link(orders[1], invoices[2], "has_invoice")
    await registry.link(invoices[1], payments[0], "payment", {"method": "credit_card"})
    await registry.link(invoices[1], payments[1], "payment", {"method": "bank_transfer"})
    await registry.link(invoices[2], payments[2], "payment", {"method": "credit_card"})

    logger.info("Billing data populated", orders=len(orders), invoices=len(invoices), payments=len(payments))
    return {"orders": orders, "invoices": invoices, "payments": payments}


async def populate_catalog(registry: EntityRegistry) -> dict[str, list[str]]:
    """Products in a two-level category tree, tagged."""
    categories = await _create(
        registry,
        "category",
        [
            {"name": "Electronics", "slug": "electronics", "status": "active"},
            {"name": "Laptops", "slug": "laptops", "status": "active"},
        ],
    )
    products = await _create(
        registry,
        "product",
        [
            {"name": "Laptop Pro", "sku": "lap-001", "price": 1999.99, "stock_quantity": 10, "status": "active"},
            {"name": "USB Cable", "sku": "usb-001", "price": 9.99, "stock_quantity": 250, "status": "active"},
        ],
    )
    tags = await _create(
        registry,
        "tag",
        [
            {"name": "bestseller", "color": "#ff0000"},
            {"name": "clearance", "color": "#00ff00"},
        ],
    )

    await registry.link(categories[1], categories[0], "has_parent")
    await registry.link(products[0], categories[1], "has_category")
    await registry.link(products[1], categories[0], "has_category")
    await registry.link(products[0], tags[0], "has_tag")
    await registry.link(products[1], tags[1], "has_tag")

    logger.info("Catalog data populated", categories=len(categories), products=len(products), tags=len(tags))
    return {"categories": categories, "products": products, "tags": tags}


async def populate_inventory(registry: EntityRegistry) -> dict[str, list[str]]:
    """A store with one warehouse, stock, an activity and its usage."""
    stores = await _create(registry, "store", [{"name": "Main Store", "status": "active", "address": "1 Main St"}])
    warehouses = await _create(
        registry,
        "warehouse",
        [{"name": "Central Warehouse", "status": "active", "location": "Dock 4", "store_id": stores[0]}],
    )
    stock_items = await _create(
        registry,
        "stock_item",
        [{"name": "Laptop stock", "status": "available", "quantity": 10, "warehouse_id": warehouses[0]}],
    )
    movements = await _create(
        registry,
        "stock_movement",
        [{"name": "Restock", "status": "completed", "movement_type": "in", "quantity": 10,
          "stock_item_id": stock_items[0]}],
    )
    activities = await _create(registry, "activity", [{"name": "Storage", "status": "active"}])
    usages = await _create(
        registry,
        "usage",
        [{"name": "Shelf space", "status": "recorded", "usage_type": "espace_utilise", "quantity": 12.5,
          "unit": "m2", "activity_id": activities[0]}],
    )

    await registry.link(stores[0], warehouses[0], "has_warehouse")
    await registry.link(stores[0], activities[0], "has_activity")
    await registry.link(warehouses[0], stock_items[0], "has_stock_item")
    await registry.link(stock_items[0], movements[0], "has_movement")
    await registry.link(activities[0], usages[0], "has_usage")

    logger.info("Inventory data populated", stores=len(stores), warehouses=len(warehouses))
    return {
        "stores": stores,
        "warehouses": warehouses,
        "stock_items": stock_items,
        "stock_movements": movements,
        "activities": activities,
        "usages": usages,
    }


async def populate_all(registry: EntityRegistry) -> dict[str, list[str]]:
    created: dict[str, list[str]] = {}
    created.update(await populate_billing(registry))
    created.update(await populate_catalog(registry))
    created.update(await populate_inventory(registry))
    return created
