from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import TypeVar

from backoffice.schemas import (
    Customer,
    CustomerIn,
    Product,
    ProductIn,
    Promotion,
    PromotionIn,
    Supplier,
    SupplierIn,
)
from backoffice.services.company_lookup_service import clean_cnpj
from backoffice.services.state_service import AppState

logger = logging.getLogger(__name__)

T = TypeVar('T', Customer, Supplier, Product, Promotion)


def _new_id() -> str:
    return uuid.uuid4().hex


def _remove_by_id(records: Sequence[T], record_id: str, label: str) -> list[T]:
    remaining = [record for record in records if record.id != record_id]
    if len(remaining) == len(records):
        raise ValueError(f'{label} not found')
    return remaining


def add_customer(state: AppState, payload: CustomerIn) -> Customer:
    data = payload.model_dump()
    data['name'] = data['name'].strip()
    data['cnpj'] = clean_cnpj(payload.cnpj) or None
    customer = Customer(id=_new_id(), **data)
    state.customers.append(customer)
    logger.info('Added customer %s', customer.id)
    return customer


def delete_customer(state: AppState, customer_id: str) -> None:
    # Orders keep their own snapshot of the customer.
    state.customers = _remove_by_id(state.customers, customer_id, 'Customer')
    logger.info('Deleted customer %s', customer_id)


def add_supplier(state: AppState, payload: SupplierIn) -> Supplier:
    data = payload.model_dump()
    data['name'] = data['name'].strip()
    data['cnpj'] = clean_cnpj(payload.cnpj)
    supplier = Supplier(id=_new_id(), **data)
    state.suppliers.append(supplier)
    logger.info('Added supplier %s', supplier.id)
    return supplier


def delete_supplier(state: AppState, supplier_id: str) -> None:
    state.suppliers = _remove_by_id(state.suppliers, supplier_id, 'Supplier')
    logger.info('Deleted supplier %s', supplier_id)


def add_product(state: AppState, payload: ProductIn) -> Product:
    data = payload.model_dump()
    data['name'] = data['name'].strip()
    data['supplier_id'] = payload.supplier_id or None
    product = Product(id=_new_id(), stock=0, **data)
    state.products.append(product)
    logger.info('Added product %s', product.id)
    return product


def delete_product(state: AppState, product_id: str) -> None:
    # Open orders may still reference the product; their lines carry the name.
    state.products = _remove_by_id(state.products, product_id, 'Product')
    logger.info('Deleted product %s', product_id)


def add_promotion(state: AppState, payload: PromotionIn) -> Promotion:
    promotion = Promotion(id=_new_id(), **payload.model_dump())
    state.promotions.append(promotion)
    return promotion


def delete_promotion(state: AppState, promotion_id: str) -> None:
    state.promotions = _remove_by_id(state.promotions, promotion_id, 'Promotion')
