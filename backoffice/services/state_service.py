"""Session context holding every persisted collection.

Handlers load an ``AppState``, mutate it through the service functions and
then call ``persist`` with the keys they touched. Each collection is written
in full, independently of the others.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel
from sqlalchemy.orm import Session

from backoffice.schemas import (
    CalendarEvent,
    Customer,
    Order,
    Product,
    Promotion,
    SalesGoal,
    StockEntry,
    Supplier,
    User,
)
from backoffice.services import storage_service as storage


@dataclass
class AppState:
    customers: list[Customer] = field(default_factory=list)
    suppliers: list[Supplier] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    stock_entries: list[StockEntry] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)
    promotions: list[Promotion] = field(default_factory=list)
    users: list[User] = field(default_factory=list)
    events: list[CalendarEvent] = field(default_factory=list)
    sales_goals: list[SalesGoal] = field(default_factory=list)


_COLLECTIONS: dict[str, tuple[str, type[BaseModel]]] = {
    storage.CUSTOMERS_KEY: ('customers', Customer),
    storage.SUPPLIERS_KEY: ('suppliers', Supplier),
    storage.PRODUCTS_KEY: ('products', Product),
    storage.STOCK_ENTRIES_KEY: ('stock_entries', StockEntry),
    storage.ORDERS_KEY: ('orders', Order),
    storage.PROMOTIONS_KEY: ('promotions', Promotion),
    storage.USERS_KEY: ('users', User),
    storage.EVENTS_KEY: ('events', CalendarEvent),
    storage.GOALS_KEY: ('sales_goals', SalesGoal),
}


def load_state(db: Session) -> AppState:
    state = AppState()
    for key, (attr, model) in _COLLECTIONS.items():
        if key == storage.USERS_KEY:
            raw = storage.load_users(db)
        else:
            raw = storage.load(db, key, [])
        setattr(state, attr, [model.model_validate(item) for item in raw])
    return state


def persist(db: Session, state: AppState, *keys: str) -> None:
    for key in keys or tuple(_COLLECTIONS):
        attr, _ = _COLLECTIONS[key]
        storage.save(db, key, [item.model_dump(mode='json') for item in getattr(state, attr)])
