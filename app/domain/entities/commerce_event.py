"""Commerce events that trigger notification fan-out."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OrderEvent:
    """Snapshot of an order at the moment it was created or changed status."""

    order_id: str
    order_number: str
    customer_id: str
    status: str
    total_amount: float
    vendor_id: str | None = None
    old_status: str | None = None


@dataclass(frozen=True)
class StockEvent:
    """A product whose stock dropped to or below its alert threshold."""

    product_id: str
    product_name: str
    current_stock: int
    threshold: int
    vendor_id: str


__all__ = ["OrderEvent", "StockEvent"]
