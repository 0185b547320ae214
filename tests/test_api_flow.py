from __future__ import annotations

import unittest
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from backoffice.config import settings
from backoffice.db import build_engine, init_db
from backoffice.main import create_app


class ApiFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = build_engine('sqlite://')
        init_db(self.engine)
        session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self.client = TestClient(create_app(session_factory))

    def tearDown(self) -> None:
        self.client.close()
        self.engine.dispose()

    def _login(self, username: str | None = None, password: str | None = None):
        return self.client.post(
            '/login',
            json={
                'username': username or settings.default_admin_username,
                'password': password or settings.default_admin_password,
            },
        )

    def _seed_catalog(self) -> tuple[str, str]:
        customer = self.client.post(
            '/customers',
            json={'name': 'Mercado Azul', 'address': {'street': 'Rua A', 'number': '10', 'city': 'Recife'}},
        )
        self.assertEqual(customer.status_code, 201)
        product = self.client.post('/products', json={'name': 'Widget', 'price': '10.00', 'cost_price': '6.00'})
        self.assertEqual(product.status_code, 201)
        product_id = product.json()['id']
        entry = self.client.post('/stock-entries', json={'product_id': product_id, 'quantity': 5, 'cost': '30.00'})
        self.assertEqual(entry.status_code, 201)
        return customer.json()['id'], product_id

    def _stock(self, product_id: str) -> int:
        products = self.client.get('/products').json()
        return next(product['stock'] for product in products if product['id'] == product_id)

    def test_requests_without_session_are_rejected(self) -> None:
        self.assertEqual(self.client.get('/orders/open').status_code, 401)
        self.assertEqual(self.client.get('/healthz').status_code, 200)

    def test_login_with_default_admin(self) -> None:
        bad = self._login(password='wrong')
        self.assertEqual(bad.status_code, 401)

        response = self._login()
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['role'], 'ADMIN')
        self.assertIn('USERS', body['views'])
        self.assertEqual(self.client.get('/me').json()['id'], settings.default_admin_id)

        self.client.post('/logout')
        self.assertEqual(self.client.get('/me').status_code, 401)

    def test_order_lifecycle(self) -> None:
        self._login()
        customer_id, product_id = self._seed_catalog()
        self.assertEqual(self._stock(product_id), 5)

        shortage = self.client.post(
            '/orders',
            json={'customer_id': customer_id, 'items': [{'product_id': product_id, 'quantity': 8}]},
        )
        self.assertEqual(shortage.status_code, 409)
        self.assertEqual(shortage.json()['detail']['shortages'][0]['available'], 5)
        self.assertEqual(self._stock(product_id), 5)

        created = self.client.post(
            '/orders',
            json={
                'customer_id': customer_id,
                'items': [{'product_id': product_id, 'quantity': 3}],
                'discount': {'mode': 'percent', 'amount': '10'},
            },
        )
        self.assertEqual(created.status_code, 201)
        order = created.json()
        self.assertEqual(Decimal(order['subtotal']), Decimal('30'))
        self.assertEqual(Decimal(order['total']), Decimal('27'))
        self.assertEqual(order['status'], 'pending')
        self.assertEqual(self._stock(product_id), 2)

        partial = self.client.post(
            f"/orders/{order['id']}/status",
            json={'status': 'partially_delivered', 'note': 'first box'},
        )
        self.assertEqual(partial.status_code, 200)
        self.assertEqual(partial.json()['delivery_notes'], 'first box')

        summary = self.client.get('/dashboard').json()['summary']
        self.assertEqual(Decimal(str(summary['realized_revenue'])), Decimal('27'))
        self.assertEqual(summary['open_order_count'], 1)
        self.assertEqual(summary['low_stock_count'], 1)

        receipt = self.client.get(f"/orders/{order['id']}/receipt")
        self.assertEqual(receipt.status_code, 200)
        self.assertIn('Mercado Azul', receipt.text)
        self.assertIn('first box', receipt.text)

        canceled = self.client.post(f"/orders/{order['id']}/cancel")
        self.assertEqual(canceled.status_code, 200)
        self.assertEqual(canceled.json()['status'], 'canceled')
        self.assertEqual(self._stock(product_id), 5)

        again = self.client.post(f"/orders/{order['id']}/cancel")
        self.assertEqual(again.status_code, 200)
        self.assertEqual(self._stock(product_id), 5)
        self.assertEqual(self.client.get('/orders/open').json(), [])

    def test_unknown_order_is_404(self) -> None:
        self._login()
        self.assertEqual(self.client.get('/orders/missing').status_code, 404)

    def test_roles_gate_views(self) -> None:
        self._login()
        created = self.client.post(
            '/users',
            json={'username': 'estoque', 'password': 'pw-123', 'name': 'Eli', 'role': 'STOCK_MANAGER'},
        )
        self.assertEqual(created.status_code, 201)
        self.assertNotIn('password_hash', created.json())

        self.assertEqual(self.client.delete(f'/users/{settings.default_admin_id}').status_code, 400)
        self.client.post('/logout')

        self.assertEqual(self._login('estoque', 'pw-123').status_code, 200)
        self.assertEqual(self.client.get('/products').status_code, 200)
        self.assertEqual(self.client.post('/orders', json={}).status_code, 403)
        self.assertEqual(self.client.get('/users').status_code, 403)

    def test_goals_round_trip(self) -> None:
        self._login()
        saved = self.client.post('/goals', json={'month': '2026-10', 'retail_target': '100', 'wholesale_target': '0'})
        self.assertEqual(saved.status_code, 200)
        updated = self.client.post('/goals', json={'month': '2026-10', 'retail_target': '150', 'wholesale_target': '0'})
        self.assertEqual(updated.json()['id'], saved.json()['id'])

        body = self.client.get('/goals', params={'month': '2026-10'}).json()
        self.assertEqual(Decimal(str(body['progress']['retail']['target'])), Decimal('150'))
        self.assertEqual(len(body['trend']), 6)


if __name__ == '__main__':
    unittest.main()
