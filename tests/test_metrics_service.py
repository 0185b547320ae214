from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from decimal import Decimal

from backoffice.models import EventType, OrderStatus, OrderType
from backoffice.schemas import CalendarEvent, Order, OrderItem, Product, SalesGoal
from backoffice.services.metrics_service import (
    dashboard_summary,
    goal_progress,
    goal_trend,
    monthly_revenue,
    realized_revenue,
    stock_snapshot,
    top_products,
    trailing_months,
    upcoming_agenda,
)


def _order(
    order_id: str,
    *,
    total: str,
    status: OrderStatus = OrderStatus.PENDING,
    created_at: datetime = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc),
    order_type: OrderType | None = OrderType.RETAIL,
    items: list[tuple[str, int]] | None = None,
) -> Order:
    return Order(
        id=order_id,
        customer_id='c1',
        customer_name='Cliente',
        items=[
            OrderItem(product_id=name, product_name=name, quantity=qty, unit_price=Decimal('1'), total=Decimal(qty))
            for name, qty in (items or [])
        ],
        subtotal=Decimal(total),
        discount_value=Decimal('0'),
        discount_percent=Decimal('0'),
        total=Decimal(total),
        created_at=created_at,
        status=status,
        order_type=order_type,
    )


class DashboardTests(unittest.TestCase):
    def test_revenue_counts_partial_and_delivered_only(self) -> None:
        orders = [
            _order('o1', total='100', status=OrderStatus.PARTIALLY_DELIVERED),
            _order('o2', total='50', status=OrderStatus.PENDING),
            _order('o3', total='30', status=OrderStatus.CANCELED),
            _order('o4', total='20', status=OrderStatus.DELIVERED),
            _order('o5', total='5', status=OrderStatus.COMPLETED),
        ]
        self.assertEqual(realized_revenue(orders), Decimal('125'))

    def test_summary_counts(self) -> None:
        today = date(2026, 10, 17)
        orders = [
            _order('o1', total='10', status=OrderStatus.PENDING),
            _order('o2', total='10', status=OrderStatus.CANCELED),
            _order('o3', total='10', status=OrderStatus.PARTIALLY_DELIVERED),
            _order('o4', total='10', status=OrderStatus.DELIVERED, created_at=datetime(2026, 10, 16, tzinfo=timezone.utc)),
        ]
        products = [
            Product(id='p1', name='Low', stock=4),
            Product(id='p2', name='Edge', stock=5),
            Product(id='p3', name='Negative', stock=-1),
        ]
        summary = dashboard_summary(orders, products, today, low_stock_threshold=5)
        self.assertEqual(summary.realized_revenue, Decimal('20'))
        self.assertEqual(summary.low_stock_count, 2)
        self.assertEqual(summary.today_order_count, 2)
        self.assertEqual(summary.open_order_count, 2)

    def test_agenda_keeps_today_and_tomorrow_sorted(self) -> None:
        today = date(2026, 10, 17)
        events = [
            CalendarEvent(id='e1', title='Entrega', date=date(2026, 10, 18), time='08:00', type=EventType.DELIVERY),
            CalendarEvent(id='e2', title='Visita', date=date(2026, 10, 17), time='15:00', type=EventType.VISIT),
            CalendarEvent(id='e3', title='Antiga', date=date(2026, 10, 16), time='10:00'),
            CalendarEvent(id='e4', title='Futura', date=date(2026, 10, 19), time='10:00'),
        ]
        self.assertEqual([event.id for event in upcoming_agenda(events, today)], ['e2', 'e1'])


class ReportTests(unittest.TestCase):
    def test_monthly_revenue_excludes_canceled(self) -> None:
        orders = [
            _order('o1', total='10', created_at=datetime(2026, 9, 3, tzinfo=timezone.utc)),
            _order('o2', total='15', created_at=datetime(2026, 9, 20, tzinfo=timezone.utc)),
            _order('o3', total='99', status=OrderStatus.CANCELED, created_at=datetime(2026, 9, 21, tzinfo=timezone.utc)),
            _order('o4', total='7', status=OrderStatus.DELIVERED, created_at=datetime(2026, 10, 1, tzinfo=timezone.utc)),
        ]
        points = monthly_revenue(orders)
        self.assertEqual([(point.month, point.total) for point in points], [('2026-09', Decimal('25')), ('2026-10', Decimal('7'))])

    def test_top_products_ranked_by_quantity(self) -> None:
        orders = [
            _order('o1', total='1', items=[('Widget', 2)]),
            _order('o2', total='1', items=[('Widget', 5), ('Gadget', 1)]),
            _order('o3', total='1', status=OrderStatus.CANCELED, items=[('Gadget', 50)]),
        ]
        ranking = top_products(orders)
        self.assertEqual([(row.name, row.quantity) for row in ranking], [('Widget', 7), ('Gadget', 1)])

    def test_top_products_limit_and_stable_ties(self) -> None:
        orders = [_order('o1', total='1', items=[(f'P{index}', 1) for index in range(12)])]
        ranking = top_products(orders)
        self.assertEqual(len(ranking), 10)
        self.assertEqual(ranking[0].name, 'P0')
        self.assertEqual(ranking[-1].name, 'P9')

    def test_stock_snapshot(self) -> None:
        rows = stock_snapshot([Product(id='p1', name='Café', stock=3)])
        self.assertEqual((rows[0].product_id, rows[0].name, rows[0].stock), ('p1', 'Café', 3))


class GoalTests(unittest.TestCase):
    def test_progress_splits_retail_and_wholesale(self) -> None:
        goals = [SalesGoal(id='g1', month='2026-10', retail_target=Decimal('100'), wholesale_target=Decimal('500'))]
        orders = [
            _order('o1', total='60', order_type=OrderType.RETAIL),
            _order('o2', total='50', order_type=None),
            _order('o3', total='200', order_type=OrderType.WHOLESALE),
            _order('o4', total='900', order_type=OrderType.WHOLESALE, status=OrderStatus.CANCELED),
            _order('o5', total='900', order_type=OrderType.WHOLESALE, created_at=datetime(2026, 9, 30, tzinfo=timezone.utc)),
        ]
        progress = goal_progress(goals, orders, '2026-10')
        self.assertEqual(progress.retail.actual, Decimal('110'))
        self.assertTrue(progress.retail.met)
        self.assertEqual(progress.retail.percent, Decimal('100'))
        self.assertEqual(progress.retail.remaining, Decimal('0'))
        self.assertEqual(progress.wholesale.actual, Decimal('200'))
        self.assertFalse(progress.wholesale.met)
        self.assertEqual(progress.wholesale.percent, Decimal('40'))
        self.assertEqual(progress.wholesale.remaining, Decimal('300'))

    def test_progress_without_goal_is_never_met(self) -> None:
        progress = goal_progress([], [_order('o1', total='10')], '2026-10')
        self.assertEqual(progress.retail.target, Decimal('0'))
        self.assertFalse(progress.retail.met)
        self.assertEqual(progress.retail.percent, Decimal('0'))

    def test_trailing_months_cross_year_boundary(self) -> None:
        self.assertEqual(
            trailing_months('2026-02', 6),
            ['2025-09', '2025-10', '2025-11', '2025-12', '2026-01', '2026-02'],
        )

    def test_trend_is_zero_filled(self) -> None:
        goals = [SalesGoal(id='g1', month='2026-08', retail_target=Decimal('10'), wholesale_target=Decimal('20'))]
        orders = [_order('o1', total='40')]
        trend = goal_trend(goals, orders, '2026-10')
        self.assertEqual([point.month for point in trend], ['2026-05', '2026-06', '2026-07', '2026-08', '2026-09', '2026-10'])
        self.assertEqual(trend[3].retail_target, Decimal('10'))
        self.assertEqual(trend[3].retail_actual, Decimal('0'))
        self.assertEqual(trend[5].retail_actual, Decimal('40'))
        self.assertEqual(trend[0].wholesale_target, Decimal('0'))


if __name__ == '__main__':
    unittest.main()
