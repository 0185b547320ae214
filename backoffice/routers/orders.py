from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from backoffice.auth import Principal, View, require_view
from backoffice.db import get_db
from backoffice.dependencies import commit_state, get_templates
from backoffice.schemas import Order, OrderIn, OrderStatusIn
from backoffice.services.company_lookup_service import format_cnpj
from backoffice.services.inventory_service import check_cart_availability
from backoffice.services.order_service import (
    DiscountRule,
    cancel_order,
    create_order,
    edit_order,
    get_order,
    list_open_orders,
    list_receivables,
    update_order_status,
)
from backoffice.services.state_service import AppState, load_state
from backoffice.services.storage_service import ORDERS_KEY, PRODUCTS_KEY

router = APIRouter(prefix='/orders', tags=['orders'])
order_access = require_view(View.NEW_ORDER, View.OPEN_ORDERS)


def _cart(payload: OrderIn) -> list[tuple[str, int]]:
    return [(line.product_id, line.quantity) for line in payload.items]


def _discount(payload: OrderIn) -> DiscountRule:
    return DiscountRule(mode=payload.discount.mode, amount=payload.discount.amount)


def _ensure_stock(state: AppState, payload: OrderIn, editing: Order | None = None) -> None:
    if payload.allow_insufficient_stock:
        return
    shortages = check_cart_availability(state.products, _cart(payload), editing_order=editing)
    if shortages:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                'message': 'Insufficient stock; resubmit with allow_insufficient_stock to proceed',
                'shortages': [
                    {
                        'product_id': shortage.product_id,
                        'product_name': shortage.product_name,
                        'requested': shortage.requested,
                        'available': shortage.available,
                    }
                    for shortage in shortages
                ],
            },
        )


def _load_order(state: AppState, order_id: str) -> Order:
    try:
        return get_order(state, order_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get('/open')
def open_orders(
    principal: Principal = Depends(require_view(View.OPEN_ORDERS)),
    db: Session = Depends(get_db),
):
    return list_open_orders(load_state(db).orders)


@router.get('/receivables')
def receivables(
    principal: Principal = Depends(require_view(View.PAYMENTS)),
    db: Session = Depends(get_db),
):
    return list_receivables(load_state(db).orders)


@router.post('', status_code=status.HTTP_201_CREATED)
def create(
    payload: OrderIn,
    principal: Principal = Depends(require_view(View.NEW_ORDER)),
    db: Session = Depends(get_db),
):
    state = load_state(db)
    _ensure_stock(state, payload)
    try:
        order = create_order(
            state,
            customer_id=payload.customer_id,
            cart=_cart(payload),
            discount=_discount(payload),
            signature=payload.signature,
            order_type=payload.order_type,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    commit_state(db, state, ORDERS_KEY, PRODUCTS_KEY)
    return order


@router.get('/{order_id}')
def detail(
    order_id: str,
    principal: Principal = Depends(require_view(View.OPEN_ORDERS, View.PAYMENTS)),
    db: Session = Depends(get_db),
):
    return _load_order(load_state(db), order_id)


@router.put('/{order_id}')
def edit(
    order_id: str,
    payload: OrderIn,
    principal: Principal = Depends(order_access),
    db: Session = Depends(get_db),
):
    state = load_state(db)
    existing = _load_order(state, order_id)
    _ensure_stock(state, payload, existing)
    try:
        order = edit_order(
            state,
            order_id,
            customer_id=payload.customer_id,
            cart=_cart(payload),
            discount=_discount(payload),
            signature=payload.signature,
            order_type=payload.order_type,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    commit_state(db, state, ORDERS_KEY, PRODUCTS_KEY)
    return order


@router.post('/{order_id}/status')
def change_status(
    order_id: str,
    payload: OrderStatusIn,
    principal: Principal = Depends(require_view(View.OPEN_ORDERS)),
    db: Session = Depends(get_db),
):
    state = load_state(db)
    _load_order(state, order_id)
    try:
        order = update_order_status(state, order_id, payload.status, payload.note)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    commit_state(db, state, ORDERS_KEY, PRODUCTS_KEY)
    return order


@router.post('/{order_id}/cancel')
def cancel(
    order_id: str,
    principal: Principal = Depends(require_view(View.OPEN_ORDERS)),
    db: Session = Depends(get_db),
):
    state = load_state(db)
    _load_order(state, order_id)
    try:
        order = cancel_order(state, order_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    commit_state(db, state, ORDERS_KEY, PRODUCTS_KEY)
    return order


@router.get('/{order_id}/receipt')
def receipt(
    order_id: str,
    request: Request,
    principal: Principal = Depends(require_view(View.OPEN_ORDERS, View.PAYMENTS, View.NEW_ORDER)),
    db: Session = Depends(get_db),
    templates: Jinja2Templates = Depends(get_templates),
):
    state = load_state(db)
    order = _load_order(state, order_id)
    customer = next((c for c in state.customers if c.id == order.customer_id), None)
    return templates.TemplateResponse(
        request,
        'receipt.html',
        {
            'order': order,
            'customer_cnpj': format_cnpj(customer.cnpj) if customer and customer.cnpj else '',
            'order_type': (order.order_type.value if order.order_type else 'RETAIL'),
        },
    )
