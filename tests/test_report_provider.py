import unittest
from datetime import datetime, timezone
from decimal import Decimal

from backoffice.schemas import Customer, Order, OrderItem, Product
from backoffice.services.mock_report_provider import MockReportProvider
from backoffice.services.report_provider import (
    EMPTY_REPORT,
    FALLBACK_REPORT,
    build_prompt,
    build_report_input,
    generate_business_report,
)


class _FailingProvider:
    def generate(self, prompt: str) -> str:
        raise RuntimeError('quota exceeded')


class _BlankProvider:
    def generate(self, prompt: str) -> str:
        return '   '


def _fixtures():
    orders = [
        Order(
            id='o1',
            customer_id='c1',
            customer_name='Mercado',
            items=[OrderItem(product_id='p1', product_name='Café', quantity=2, unit_price=Decimal('10'), total=Decimal('20'))],
            subtotal=Decimal('20'),
            discount_value=Decimal('0'),
            discount_percent=Decimal('0'),
            total=Decimal('20'),
            created_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
        )
    ]
    products = [Product(id='p1', name='Café', stock=2), Product(id='p2', name='Açúcar', stock=50)]
    customers = [Customer(id='c1', name='Mercado')]
    return orders, products, customers


class ReportProviderTests(unittest.TestCase):
    def test_prompt_carries_figures(self) -> None:
        orders, products, customers = _fixtures()
        data = build_report_input(orders, products, customers)
        self.assertEqual(data.low_stock_products, ['Café'])
        prompt = build_prompt(data)
        self.assertIn('Total revenue: 20.00', prompt)
        self.assertIn('Total orders: 1', prompt)
        self.assertIn('Total customers: 1', prompt)

    def test_mock_provider_echoes_summary(self) -> None:
        orders, products, customers = _fixtures()
        report = generate_business_report(MockReportProvider(), orders=orders, products=products, customers=customers)
        self.assertIn('Revenue analysed: 20.00', report)
        self.assertIn('Low stock: Café', report)

    def test_failure_returns_fallback_text(self) -> None:
        orders, products, customers = _fixtures()
        report = generate_business_report(_FailingProvider(), orders=orders, products=products, customers=customers)
        self.assertEqual(report, FALLBACK_REPORT)

    def test_blank_answer_returns_placeholder(self) -> None:
        report = generate_business_report(_BlankProvider(), orders=[], products=[], customers=[])
        self.assertEqual(report, EMPTY_REPORT)


if __name__ == '__main__':
    unittest.main()
