from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.auth import Principal, View, require_view
from backoffice.db import get_db
from backoffice.dependencies import commit_state
from backoffice.schemas import CustomerIn, ProductIn, PromotionIn, StockEntryIn, SupplierIn
from backoffice.services import directory_service
from backoffice.services.company_lookup_service import (
    CompanyLookupError,
    LookupFailure,
    lookup_company,
    prefill_customer,
    prefill_supplier,
)
from backoffice.services.inventory_service import find_product, receive_stock
from backoffice.services.state_service import load_state
from backoffice.services.storage_service import (
    CUSTOMERS_KEY,
    PRODUCTS_KEY,
    PROMOTIONS_KEY,
    STOCK_ENTRIES_KEY,
    SUPPLIERS_KEY,
)

router = APIRouter(tags=['catalog'])
customer_access = require_view(View.CUSTOMERS)
supplier_access = require_view(View.SUPPLIERS)
product_access = require_view(View.PRODUCTS)
inventory_access = require_view(View.INVENTORY)

LOOKUP_STATUS = {
    LookupFailure.MALFORMED: status.HTTP_400_BAD_REQUEST,
    LookupFailure.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    LookupFailure.UNREACHABLE: status.HTTP_502_BAD_GATEWAY,
}


@router.get('/customers')
def list_customers(
    principal: Principal = Depends(require_view(View.CUSTOMERS, View.NEW_ORDER, View.AGENDA)),
    db: Session = Depends(get_db),
):
    return load_state(db).customers


@router.post('/customers', status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerIn, principal: Principal = Depends(customer_access), db: Session = Depends(get_db)):
    state = load_state(db)
    customer = directory_service.add_customer(state, payload)
    commit_state(db, state, CUSTOMERS_KEY)
    return customer


@router.delete('/customers/{customer_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_customer(customer_id: str, principal: Principal = Depends(customer_access), db: Session = Depends(get_db)):
    state = load_state(db)
    try:
        directory_service.delete_customer(state, customer_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    commit_state(db, state, CUSTOMERS_KEY)


@router.get('/suppliers')
def list_suppliers(
    principal: Principal = Depends(require_view(View.SUPPLIERS, View.INVENTORY, View.PRODUCTS, View.AGENDA)),
    db: Session = Depends(get_db),
):
    return load_state(db).suppliers


@router.post('/suppliers', status_code=status.HTTP_201_CREATED)
def create_supplier(payload: SupplierIn, principal: Principal = Depends(supplier_access), db: Session = Depends(get_db)):
    state = load_state(db)
    supplier = directory_service.add_supplier(state, payload)
    commit_state(db, state, SUPPLIERS_KEY)
    return supplier


@router.delete('/suppliers/{supplier_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_supplier(supplier_id: str, principal: Principal = Depends(supplier_access), db: Session = Depends(get_db)):
    state = load_state(db)
    try:
        directory_service.delete_supplier(state, supplier_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    commit_state(db, state, SUPPLIERS_KEY)


@router.get('/company-lookup/{cnpj}')
def company_lookup(
    cnpj: str,
    kind: str = 'customer',
    principal: Principal = Depends(require_view(View.CUSTOMERS, View.SUPPLIERS)),
):
    try:
        record = lookup_company(cnpj)
    except CompanyLookupError as exc:
        raise HTTPException(status_code=LOOKUP_STATUS[exc.kind], detail=str(exc)) from exc
    if kind == 'supplier':
        return prefill_supplier(record)
    return prefill_customer(record)


@router.get('/products')
def list_products(
    principal: Principal = Depends(require_view(View.PRODUCTS, View.INVENTORY, View.NEW_ORDER)),
    db: Session = Depends(get_db),
):
    return load_state(db).products


@router.post('/products', status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductIn, principal: Principal = Depends(product_access), db: Session = Depends(get_db)):
    state = load_state(db)
    product = directory_service.add_product(state, payload)
    commit_state(db, state, PRODUCTS_KEY)
    return product


@router.delete('/products/{product_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_product(product_id: str, principal: Principal = Depends(product_access), db: Session = Depends(get_db)):
    state = load_state(db)
    try:
        directory_service.delete_product(state, product_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    commit_state(db, state, PRODUCTS_KEY)


@router.get('/stock-entries')
def list_stock_entries(principal: Principal = Depends(inventory_access), db: Session = Depends(get_db)):
    return sorted(load_state(db).stock_entries, key=lambda entry: entry.received_at, reverse=True)


@router.post('/stock-entries', status_code=status.HTTP_201_CREATED)
def create_stock_entry(payload: StockEntryIn, principal: Principal = Depends(inventory_access), db: Session = Depends(get_db)):
    state = load_state(db)
    if find_product(state.products, payload.product_id) is None:
        raise HTTPException(status_code=404, detail='Product not found')
    try:
        entry = receive_stock(
            state,
            product_id=payload.product_id,
            supplier_id=payload.supplier_id,
            quantity=payload.quantity,
            cost=payload.cost,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    commit_state(db, state, STOCK_ENTRIES_KEY, PRODUCTS_KEY)
    return entry


@router.get('/promotions')
def list_promotions(principal: Principal = Depends(require_view(View.PRODUCTS, View.NEW_ORDER)), db: Session = Depends(get_db)):
    return load_state(db).promotions


@router.post('/promotions', status_code=status.HTTP_201_CREATED)
def create_promotion(payload: PromotionIn, principal: Principal = Depends(product_access), db: Session = Depends(get_db)):
    state = load_state(db)
    promotion = directory_service.add_promotion(state, payload)
    commit_state(db, state, PROMOTIONS_KEY)
    return promotion


@router.delete('/promotions/{promotion_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_promotion(promotion_id: str, principal: Principal = Depends(product_access), db: Session = Depends(get_db)):
    state = load_state(db)
    try:
        directory_service.delete_promotion(state, promotion_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    commit_state(db, state, PROMOTIONS_KEY)
