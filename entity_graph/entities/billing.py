"""Billing entities: orders, invoices and payments."""

from dataclasses import dataclass
from typing import ClassVar

from entity_graph.models import Entity
from entity_graph.validation import RuleSet

NUMBER = {"filters": ["trim", "uppercase"], "validators": [{"string_length": [3, 50]}]}


def _amount(limit: float, required: bool) -> dict:
    return {
        "required": required,
        "filters": [{"round_decimals": 2}],
        "validators": ["positive", {"max_value": limit}],
    }


def _choice(values: list[str], required: bool) -> dict:
    return {"required": required, "filters": ["trim", "lowercase"], "validators": [{"in_list": values}]}


ORDER_STATUSES = ["pending", "confirmed", "cancelled", "paid"]
INVOICE_STATUSES = ["draft", "sent", "paid", "cancelled"]
PAYMENT_STATUSES = ["pending", "completed", "failed"]
PAYMENT_METHODS = ["credit_card", "bank_transfer", "cash"]
DATE = {"validators": [{"date_format": "%Y-%m-%d"}]}


@dataclass(kw_only=True)
class Order(Entity):
    entity_type: ClassVar[str] = "order"
    plural: ClassVar[str] = "orders"
    rules: ClassVar[RuleSet] = RuleSet.from_dict(
        {
            "create": {
                "number": {"required": True, **NUMBER},
                "amount": _amount(2_000_000.0, required=True),
                "status": _choice(ORDER_STATUSES, required=True),
            },
            "update": {
                "amount": _amount(2_000_000.0, required=False),
                "status": _choice(ORDER_STATUSES, required=False),
            },
        }
    )

    name: str = "Order"
    status: str = "pending"
    number: str = "ORD-000"
    amount: float = 0.0
    customer_name: str | None = None
    notes: str | None = None


@dataclass(kw_only=True)
class Invoice(Entity):
    entity_type: ClassVar[str] = "invoice"
    plural: ClassVar[str] = "invoices"
    rules: ClassVar[RuleSet] = RuleSet.from_dict(
        {
            "create": {
                "number": {"required": True, **NUMBER},
                "amount": _amount(1_000_000.0, required=True),
                "status": _choice(INVOICE_STATUSES, required=True),
                "due_date": DATE,
            },
            "update": {
                "amount": _amount(1_000_000.0, required=False),
                "status": _choice(INVOICE_STATUSES, required=False),
                "due_date": DATE,
            },
        }
    )

    name: str = "Invoice"
    status: str = "draft"
    number: str = "INV-000"
    amount: float = 0.0
    due_date: str | None = None
    paid_at: str | None = None


@dataclass(kw_only=True)
class Payment(Entity):
    entity_type: ClassVar[str] = "payment"
    plural: ClassVar[str] = "payments"
    rules: ClassVar[RuleSet] = RuleSet.from_dict(
        {
            "create": {
                "number": {"required": True, **NUMBER},
                "amount": _amount(2_000_000.0, required=True),
                "method": _choice(PAYMENT_METHODS, required=True),
                "status": _choice(PAYMENT_STATUSES, required=True),
            },
            "update": {
                "amount": _amount(2_000_000.0, required=False),
                "method": _choice(PAYMENT_METHODS, required=False),
                "status": _choice(PAYMENT_STATUSES, required=False),
            },
        }
    )

    name: str = "Payment"
    status: str = "pending"
    number: str = "PAY-000"
    amount: float = 0.0
    method: str = "credit_card"
    transaction_id: str | None = None
