from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from backoffice.models import DiscountMode, OrderStatus, OrderType
from backoffice.schemas import Customer, Order, OrderItem
from backoffice.services.inventory_service import find_product, reconcile_order_edit, release_for_order, reserve_for_order
from backoffice.services.state_service import AppState

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')

OPEN_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PARTIALLY_DELIVERED})
REVENUE_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.COMPLETED, OrderStatus.PARTIALLY_DELIVERED})

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.PARTIALLY_DELIVERED, OrderStatus.DELIVERED, OrderStatus.CANCELED}
    ),
    OrderStatus.PARTIALLY_DELIVERED: frozenset(
        {OrderStatus.PARTIALLY_DELIVERED, OrderStatus.DELIVERED, OrderStatus.CANCELED}
    ),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELED: frozenset(),
}


@dataclass(frozen=True)
class DiscountRule:
    mode: DiscountMode = DiscountMode.VALUE
    amount: Decimal = Decimal('0')


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_value: Decimal
    discount_percent: Decimal
    total: Decimal


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def quantize_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def is_revenue_status(status: OrderStatus) -> bool:
    return status in REVENUE_STATUSES


def is_open_status(status: OrderStatus) -> bool:
    return status in OPEN_STATUSES


def compute_totals(items: Iterable[OrderItem], discount: DiscountRule) -> OrderTotals:
    subtotal = quantize_money(sum((item.unit_price * item.quantity for item in items), Decimal('0')))
    amount = Decimal(discount.amount)

    if discount.mode == DiscountMode.PERCENT:
        discount_percent = amount
        discount_value = quantize_money(subtotal * amount / Decimal('100'))
    else:
        discount_value = quantize_money(amount)
        if subtotal > 0:
            discount_percent = discount_value / subtotal * Decimal('100')
        else:
            discount_percent = Decimal('0')

    return OrderTotals(
        subtotal=subtotal,
        discount_value=discount_value,
        discount_percent=discount_percent.quantize(CENTS, rounding=ROUND_HALF_UP),
        total=subtotal - discount_value,
    )


def build_order_items(state: AppState, cart: Iterable[tuple[str, int]]) -> list[OrderItem]:
    quantities: dict[str, int] = {}
    for product_id, quantity in cart:
        if quantity <= 0:
            raise ValueError('Quantity must be greater than zero')
        quantities[product_id] = quantities.get(product_id, 0) + quantity

    items: list[OrderItem] = []
    for product_id, quantity in quantities.items():
        product = find_product(state.products, product_id)
        if product is None:
            raise ValueError(f'Product {product_id} not found')
        unit_price = quantize_money(product.price)
        items.append(
            OrderItem(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=unit_price,
                total=quantize_money(unit_price * quantity),
            )
        )
    if not items:
        raise ValueError('Add at least one product to the order')
    return items


def _find_customer(state: AppState, customer_id: str | None) -> Customer:
    if not customer_id:
        raise ValueError('Select a customer for the order')
    for customer in state.customers:
        if customer.id == customer_id:
            return customer
    raise ValueError('Customer not found')


def get_order(state: AppState, order_id: str) -> Order:
    for order in state.orders:
        if order.id == order_id:
            return order
    raise ValueError('Order not found')


def create_order(
    state: AppState,
    *,
    customer_id: str | None,
    cart: Iterable[tuple[str, int]],
    discount: DiscountRule | None = None,
    signature: str | None = None,
    order_type: OrderType = OrderType.RETAIL,
) -> Order:
    customer = _find_customer(state, customer_id)
    items = build_order_items(state, cart)
    totals = compute_totals(items, discount or DiscountRule())

    order = Order(
        id=uuid.uuid4().hex,
        customer_id=customer.id,
        customer_name=customer.name,
        customer_address=customer.address.model_copy(),
        items=items,
        subtotal=totals.subtotal,
        discount_value=totals.discount_value,
        discount_percent=totals.discount_percent,
        total=totals.total,
        created_at=_now(),
        status=OrderStatus.PENDING,
        signature=signature or None,
        order_type=order_type,
    )
    reserve_for_order(state.products, order.items)
    state.orders.append(order)
    logger.info('Created order %s for customer %s total=%s', order.id, customer.id, order.total)
    return order


def edit_order(
    state: AppState,
    order_id: str,
    *,
    customer_id: str | None,
    cart: Iterable[tuple[str, int]],
    discount: DiscountRule | None = None,
    signature: str | None = None,
    order_type: OrderType = OrderType.RETAIL,
) -> Order:
    existing = get_order(state, order_id)
    if not is_open_status(existing.status):
        raise ValueError('Only open orders can be edited')

    customer = _find_customer(state, customer_id)
    items = build_order_items(state, cart)
    totals = compute_totals(items, discount or DiscountRule())

    updated = existing.model_copy(
        update={
            'customer_id': customer.id,
            'customer_name': customer.name,
            'customer_address': customer.address.model_copy(),
            'items': items,
            'subtotal': totals.subtotal,
            'discount_value': totals.discount_value,
            'discount_percent': totals.discount_percent,
            'total': totals.total,
            'signature': signature or None,
            'order_type': order_type,
        }
    )
    reconcile_order_edit(state.products, existing.items, updated.items)
    state.orders = [updated if order.id == order_id else order for order in state.orders]
    logger.info('Edited order %s total=%s', order_id, updated.total)
    return updated


def _append_note(existing: str | None, note: str | None) -> str | None:
    if not note:
        return existing
    if existing:
        return f'{existing}\n{note}'
    return note


def cancel_order(state: AppState, order_id: str) -> Order:
    order = get_order(state, order_id)
    if order.status == OrderStatus.CANCELED:
        return order
    if OrderStatus.CANCELED not in ALLOWED_TRANSITIONS[order.status]:
        raise ValueError(f'Cannot cancel an order that is {order.status.value}')

    # Partial deliveries are informational; the full reservation comes back.
    release_for_order(state.products, order.items)
    order.status = OrderStatus.CANCELED
    logger.info('Canceled order %s', order_id)
    return order


def update_order_status(
    state: AppState,
    order_id: str,
    status: OrderStatus,
    note: str | None = None,
) -> Order:
    order = get_order(state, order_id)
    if status == OrderStatus.CANCELED:
        if order.status == OrderStatus.CANCELED:
            return order
        cancel_order(state, order_id)
        order.delivery_notes = _append_note(order.delivery_notes, note)
        return order

    if status not in ALLOWED_TRANSITIONS[order.status]:
        raise ValueError(f'Cannot move order from {order.status.value} to {status.value}')

    order.status = status
    order.delivery_notes = _append_note(order.delivery_notes, note)
    logger.info('Order %s moved to %s', order_id, status.value)
    return order


def list_open_orders(orders: Iterable[Order]) -> list[Order]:
    return [order for order in orders if is_open_status(order.status)]


def list_receivables(orders: Iterable[Order]) -> list[Order]:
    receivables = [order for order in orders if order.status != OrderStatus.CANCELED]
    return sorted(receivables, key=lambda order: order.created_at, reverse=True)
