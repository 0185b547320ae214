from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from backoffice.schemas import Order, OrderItem, Product, StockEntry
from backoffice.services.state_service import AppState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockShortage:
    product_id: str
    product_name: str
    requested: int
    available: int


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def find_product(products: list[Product], product_id: str) -> Product | None:
    for product in products:
        if product.id == product_id:
            return product
    return None


def apply_stock_delta(products: list[Product], product_id: str, delta: int) -> Product | None:
    product = find_product(products, product_id)
    if product is None:
        # Unknown products are ignored; the order still keeps its line.
        logger.debug('Stock delta %s ignored for unknown product %s', delta, product_id)
        return None
    product.stock += delta
    return product


def reserve_for_order(products: list[Product], items: Iterable[OrderItem]) -> None:
    for item in items:
        apply_stock_delta(products, item.product_id, -item.quantity)


def release_for_order(products: list[Product], items: Iterable[OrderItem]) -> None:
    for item in items:
        apply_stock_delta(products, item.product_id, item.quantity)


def reconcile_order_edit(
    products: list[Product],
    old_items: Iterable[OrderItem],
    new_items: Iterable[OrderItem],
) -> None:
    release_for_order(products, old_items)
    reserve_for_order(products, new_items)


def receive_stock(
    state: AppState,
    *,
    product_id: str,
    supplier_id: str | None,
    quantity: int,
    cost: Decimal = Decimal('0'),
    received_at: datetime | None = None,
) -> StockEntry:
    if quantity <= 0:
        raise ValueError('Quantity must be greater than zero')

    entry = StockEntry(
        id=uuid.uuid4().hex,
        product_id=product_id,
        supplier_id=supplier_id or None,
        quantity=quantity,
        received_at=received_at or _now(),
        cost=cost,
    )
    state.stock_entries.append(entry)
    apply_stock_delta(state.products, product_id, quantity)
    logger.info('Received %s units of product %s', quantity, product_id)
    return entry


def available_quantity(products: list[Product], product_id: str, editing_order: Order | None = None) -> int:
    product = find_product(products, product_id)
    if product is None:
        return 0
    available = product.stock
    if editing_order is not None:
        # The order under edit already holds its own reservation.
        available += sum(item.quantity for item in editing_order.items if item.product_id == product_id)
    return available


def check_cart_availability(
    products: list[Product],
    cart: Iterable[tuple[str, int]],
    *,
    editing_order: Order | None = None,
) -> list[StockShortage]:
    requested: dict[str, int] = {}
    for product_id, quantity in cart:
        requested[product_id] = requested.get(product_id, 0) + quantity

    shortages: list[StockShortage] = []
    for product_id, quantity in requested.items():
        product = find_product(products, product_id)
        if product is None:
            continue
        available = available_quantity(products, product_id, editing_order)
        if quantity > available:
            shortages.append(
                StockShortage(
                    product_id=product_id,
                    product_name=product.name,
                    requested=quantity,
                    available=available,
                )
            )
    return shortages
