from __future__ import annotations

import unittest
from decimal import Decimal

from sqlalchemy.orm import sessionmaker

from backoffice.config import settings
from backoffice.db import build_engine, init_db
from backoffice.models import UserRole
from backoffice.schemas import Product
from backoffice.security.passwords import verify_password
from backoffice.services import storage_service as storage
from backoffice.services.state_service import load_state, persist


class StorageTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = build_engine('sqlite://')
        init_db(self.engine)
        self.session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self.db = self.session_factory()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()


class KeyValueTests(StorageTestCase):
    def test_missing_key_returns_default(self) -> None:
        self.assertEqual(storage.load(self.db, storage.PRODUCTS_KEY, []), [])
        self.assertIsNone(storage.load(self.db, 'unknown', None))

    def test_save_overwrites_whole_value(self) -> None:
        storage.save(self.db, storage.PRODUCTS_KEY, [{'id': 'a'}, {'id': 'b'}])
        storage.save(self.db, storage.PRODUCTS_KEY, [{'id': 'c'}])
        self.db.commit()
        with self.session_factory() as other:
            self.assertEqual(storage.load(other, storage.PRODUCTS_KEY, []), [{'id': 'c'}])


class DefaultAdminTests(StorageTestCase):
    def test_first_load_seeds_single_admin(self) -> None:
        users = storage.load_users(self.db)
        self.assertEqual(len(users), 1)
        self.assertEqual(users[0]['role'], UserRole.ADMIN.value)
        self.assertEqual(users[0]['username'], settings.default_admin_username)
        self.assertTrue(verify_password(settings.default_admin_password, users[0]['password_hash']))

        self.db.commit()
        self.assertEqual(storage.load_users(self.db), users)
        self.assertEqual(len(storage.load(self.db, storage.USERS_KEY, [])), 1)

    def test_emptied_collection_is_reseeded(self) -> None:
        storage.save(self.db, storage.USERS_KEY, [])
        users = storage.load_users(self.db)
        self.assertEqual([user['id'] for user in users], [settings.default_admin_id])


class AppStateTests(StorageTestCase):
    def test_persist_only_touches_given_keys(self) -> None:
        state = load_state(self.db)
        state.products.append(Product(id='p1', name='Café', price=Decimal('18.90'), stock=4))
        state.customers = []
        persist(self.db, state, storage.PRODUCTS_KEY)
        self.db.commit()

        self.assertIsNone(storage.load(self.db, storage.CUSTOMERS_KEY, None))
        reloaded = load_state(self.db)
        self.assertEqual(reloaded.products[0].price, Decimal('18.90'))
        self.assertEqual(reloaded.products[0].stock, 4)
        self.assertEqual(len(reloaded.users), 1)


if __name__ == '__main__':
    unittest.main()
