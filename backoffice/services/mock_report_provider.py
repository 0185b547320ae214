from __future__ import annotations

import re

_REVENUE_RE = re.compile(r'Total revenue: ([\d.]+)')
_ORDERS_RE = re.compile(r'Total orders: (\d+)')
_LOW_STOCK_RE = re.compile(r'Low stock products \(<\d+\): (.*)')


class MockReportProvider:
    """Offline stand-in that echoes the prompt figures back as Markdown."""

    def generate(self, prompt: str) -> str:
        revenue = _REVENUE_RE.search(prompt)
        orders = _ORDERS_RE.search(prompt)
        low_stock = _LOW_STOCK_RE.search(prompt)
        lines = [
            '## Business summary',
            '',
            f"- Revenue analysed: {revenue.group(1) if revenue else '0.00'}",
            f"- Orders analysed: {orders.group(1) if orders else '0'}",
            f"- Low stock: {low_stock.group(1).strip() if low_stock else 'None'}",
            '',
            '_Generated offline; configure REPORT_PROVIDER=gemini for a full analysis._',
        ]
        return '\n'.join(lines)
