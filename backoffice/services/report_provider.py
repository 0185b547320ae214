from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from backoffice.config import settings
from backoffice.schemas import Customer, Order, Product

logger = logging.getLogger(__name__)

FALLBACK_REPORT = 'Could not reach the report generator. Check the API key or try again later.'
EMPTY_REPORT = 'No analysis could be generated right now.'
RECENT_ORDER_SAMPLE = 20


@dataclass(frozen=True)
class ReportInput:
    total_revenue: Decimal
    order_count: int
    customer_count: int
    low_stock_products: list[str]
    recent_orders: list[dict]


class ReportProvider(Protocol):
    def generate(self, prompt: str) -> str: ...


def build_report_input(
    orders: Iterable[Order],
    products: Iterable[Product],
    customers: Iterable[Customer],
) -> ReportInput:
    orders = list(orders)
    return ReportInput(
        total_revenue=sum((order.total for order in orders), Decimal('0.00')),
        order_count=len(orders),
        customer_count=len(list(customers)),
        low_stock_products=[product.name for product in products if product.stock < settings.low_stock_threshold],
        recent_orders=[
            {
                'date': order.created_at.isoformat(),
                'total': str(order.total),
                'items': [item.product_name for item in order.items],
            }
            for order in orders[-RECENT_ORDER_SAMPLE:]
        ],
    )


def build_prompt(data: ReportInput) -> str:
    low_stock = ', '.join(data.low_stock_products) or 'None'
    return (
        'Act as a senior business consultant. Analyse the following sales data from a small '
        'company and write a concise, actionable report.\n\n'
        'Overview:\n'
        f'- Total revenue: {data.total_revenue:.2f}\n'
        f'- Total orders: {data.order_count}\n'
        f'- Total customers: {data.customer_count}\n'
        f'- Low stock products (<{settings.low_stock_threshold}): {low_stock}\n\n'
        'Sample of recent orders (JSON):\n'
        f'{json.dumps(data.recent_orders)}\n\n'
        'Please provide:\n'
        '1. A brief trend analysis.\n'
        '2. Suggestions to improve sales.\n'
        '3. Alerts about stock or customer management.\n\n'
        'Use clear Markdown formatting.'
    )


def generate_business_report(
    provider: ReportProvider,
    *,
    orders: Iterable[Order],
    products: Iterable[Product],
    customers: Iterable[Customer],
) -> str:
    prompt = build_prompt(build_report_input(orders, products, customers))
    try:
        text = provider.generate(prompt)
    except Exception as exc:
        logger.warning('Business report generation failed: %s', exc)
        return FALLBACK_REPORT
    return text.strip() or EMPTY_REPORT
