"""Read-only projections over orders, products, events and goals.

Nothing here is cached; callers pass the current collections each time.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from backoffice.config import settings
from backoffice.models import OrderStatus, OrderType
from backoffice.schemas import CalendarEvent, Order, Product, SalesGoal
from backoffice.services.goal_service import find_goal
from backoffice.services.order_service import is_open_status, is_revenue_status, quantize_money

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class DashboardSummary:
    realized_revenue: Decimal
    low_stock_count: int
    today_order_count: int
    open_order_count: int


@dataclass(frozen=True)
class MonthlyRevenuePoint:
    month: str
    total: Decimal


@dataclass(frozen=True)
class ProductRanking:
    name: str
    quantity: int


@dataclass(frozen=True)
class StockLevel:
    product_id: str
    name: str
    stock: int


@dataclass(frozen=True)
class GoalLine:
    actual: Decimal
    target: Decimal
    percent: Decimal
    remaining: Decimal
    met: bool


@dataclass(frozen=True)
class GoalProgress:
    month: str
    retail: GoalLine
    wholesale: GoalLine


@dataclass(frozen=True)
class GoalTrendPoint:
    month: str
    retail_actual: Decimal
    wholesale_actual: Decimal
    retail_target: Decimal
    wholesale_target: Decimal


def _active(orders: Iterable[Order]) -> list[Order]:
    return [order for order in orders if order.status != OrderStatus.CANCELED]


def month_key(order: Order) -> str:
    return order.created_at.strftime('%Y-%m')


def realized_revenue(orders: Iterable[Order]) -> Decimal:
    return sum((order.total for order in orders if is_revenue_status(order.status)), ZERO)


def dashboard_summary(
    orders: Iterable[Order],
    products: Iterable[Product],
    today: date,
    *,
    low_stock_threshold: int | None = None,
) -> DashboardSummary:
    orders = list(orders)
    threshold = settings.low_stock_threshold if low_stock_threshold is None else low_stock_threshold
    return DashboardSummary(
        realized_revenue=realized_revenue(orders),
        low_stock_count=sum(1 for product in products if product.stock < threshold),
        today_order_count=sum(1 for order in _active(orders) if order.created_at.date() == today),
        open_order_count=sum(1 for order in orders if is_open_status(order.status)),
    )


def upcoming_agenda(events: Iterable[CalendarEvent], today: date) -> list[CalendarEvent]:
    tomorrow = today + timedelta(days=1)
    upcoming = [event for event in events if event.date in (today, tomorrow)]
    return sorted(upcoming, key=lambda event: (event.date, event.time))


def monthly_revenue(orders: Iterable[Order]) -> list[MonthlyRevenuePoint]:
    totals: dict[str, Decimal] = {}
    for order in _active(orders):
        key = month_key(order)
        totals[key] = totals.get(key, ZERO) + order.total
    return [MonthlyRevenuePoint(month=key, total=total) for key, total in totals.items()]


def top_products(orders: Iterable[Order], *, limit: int = 10) -> list[ProductRanking]:
    counts: dict[str, int] = {}
    for order in _active(orders):
        for item in order.items:
            counts[item.product_name] = counts.get(item.product_name, 0) + item.quantity
    ranked = sorted(counts.items(), key=lambda pair: pair[1], reverse=True)
    return [ProductRanking(name=name, quantity=quantity) for name, quantity in ranked[:limit]]


def stock_snapshot(products: Iterable[Product]) -> list[StockLevel]:
    return [StockLevel(product_id=product.id, name=product.name, stock=product.stock) for product in products]


def _is_retail(order: Order) -> bool:
    return order.order_type is None or order.order_type == OrderType.RETAIL


def _split_actuals(orders: Iterable[Order], month: str) -> tuple[Decimal, Decimal]:
    retail = ZERO
    wholesale = ZERO
    for order in _active(orders):
        if month_key(order) != month:
            continue
        if _is_retail(order):
            retail += order.total
        else:
            wholesale += order.total
    return retail, wholesale


def _goal_line(actual: Decimal, target: Decimal) -> GoalLine:
    if target > 0:
        percent = min(Decimal('100'), actual / target * Decimal('100'))
    else:
        percent = Decimal('0')
    return GoalLine(
        actual=actual,
        target=target,
        percent=quantize_money(percent),
        remaining=max(ZERO, target - actual),
        met=target > 0 and actual >= target,
    )


def goal_progress(goals: Iterable[SalesGoal], orders: Iterable[Order], month: str) -> GoalProgress:
    goal = find_goal(goals, month)
    retail_target = goal.retail_target if goal else ZERO
    wholesale_target = goal.wholesale_target if goal else ZERO
    retail, wholesale = _split_actuals(orders, month)
    return GoalProgress(
        month=month,
        retail=_goal_line(retail, retail_target),
        wholesale=_goal_line(wholesale, wholesale_target),
    )


def trailing_months(current_month: str, count: int) -> list[str]:
    year, month = (int(part) for part in current_month.split('-'))
    months: list[str] = []
    for _ in range(count):
        months.append(f'{year:04d}-{month:02d}')
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(months))


def goal_trend(
    goals: Iterable[SalesGoal],
    orders: Iterable[Order],
    current_month: str,
    *,
    months: int = 6,
) -> list[GoalTrendPoint]:
    goals = list(goals)
    orders = list(orders)
    points: list[GoalTrendPoint] = []
    for month in trailing_months(current_month, months):
        goal = find_goal(goals, month)
        retail, wholesale = _split_actuals(orders, month)
        points.append(
            GoalTrendPoint(
                month=month,
                retail_actual=retail,
                wholesale_actual=wholesale,
                retail_target=goal.retail_target if goal else ZERO,
                wholesale_target=goal.wholesale_target if goal else ZERO,
            )
        )
    return points
