from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.config import settings
from backoffice.models import StorageEntry, UserRole
from backoffice.security.passwords import hash_password

logger = logging.getLogger(__name__)

CUSTOMERS_KEY = 'app_customers'
SUPPLIERS_KEY = 'app_suppliers'
PRODUCTS_KEY = 'app_products'
STOCK_ENTRIES_KEY = 'app_stock_entries'
ORDERS_KEY = 'app_orders'
PROMOTIONS_KEY = 'app_promotions'
USERS_KEY = 'app_users'
EVENTS_KEY = 'app_events'
GOALS_KEY = 'app_sales_goals'

COLLECTION_KEYS = (
    CUSTOMERS_KEY,
    SUPPLIERS_KEY,
    PRODUCTS_KEY,
    STOCK_ENTRIES_KEY,
    ORDERS_KEY,
    PROMOTIONS_KEY,
    USERS_KEY,
    EVENTS_KEY,
    GOALS_KEY,
)


def load(db: Session, key: str, default: Any) -> Any:
    row = db.execute(select(StorageEntry).where(StorageEntry.key == key)).scalar_one_or_none()
    if row is None:
        return default
    return row.value


def save(db: Session, key: str, value: Any) -> None:
    row = db.execute(select(StorageEntry).where(StorageEntry.key == key)).scalar_one_or_none()
    if row is None:
        db.add(StorageEntry(key=key, value=value))
    else:
        row.value = value
    db.flush()


def default_admin_record() -> dict:
    return {
        'id': settings.default_admin_id,
        'username': settings.default_admin_username,
        'password_hash': hash_password(settings.default_admin_password),
        'name': settings.default_admin_name,
        'role': UserRole.ADMIN.value,
    }


def load_users(db: Session) -> list[dict]:
    users = load(db, USERS_KEY, [])
    if users:
        return users

    admin = default_admin_record()
    save(db, USERS_KEY, [admin])
    logger.info('Seeded default administrator %s', admin['username'])
    return [admin]
