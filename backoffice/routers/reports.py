from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backoffice.auth import Principal, View, require_view
from backoffice.db import get_db
from backoffice.dependencies import commit_state
from backoffice.models import OrderStatus
from backoffice.schemas import MONTH_PATTERN, SalesGoalIn
from backoffice.services.goal_service import upsert_goal
from backoffice.services.metrics_service import (
    dashboard_summary,
    goal_progress,
    goal_trend,
    monthly_revenue,
    stock_snapshot,
    top_products,
    upcoming_agenda,
)
from backoffice.services.provider_factory import get_report_provider
from backoffice.services.report_provider import FALLBACK_REPORT, generate_business_report
from backoffice.services.state_service import load_state
from backoffice.services.storage_service import GOALS_KEY

router = APIRouter(tags=['reports'])
logger = logging.getLogger(__name__)
reports_access = require_view(View.REPORTS)
goals_access = require_view(View.GOALS)


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def _current_month() -> str:
    return _today().strftime('%Y-%m')


@router.get('/dashboard')
def dashboard(principal: Principal = Depends(require_view(View.DASHBOARD)), db: Session = Depends(get_db)):
    state = load_state(db)
    today = _today()
    return {
        'summary': dashboard_summary(state.orders, state.products, today),
        'agenda': upcoming_agenda(state.events, today),
    }


@router.get('/reports/monthly-revenue')
def monthly_revenue_report(principal: Principal = Depends(reports_access), db: Session = Depends(get_db)):
    return monthly_revenue(load_state(db).orders)


@router.get('/reports/top-products')
def top_products_report(
    limit: int = Query(default=10, ge=1, le=100),
    principal: Principal = Depends(reports_access),
    db: Session = Depends(get_db),
):
    return top_products(load_state(db).orders, limit=limit)


@router.get('/reports/stock')
def stock_report(principal: Principal = Depends(reports_access), db: Session = Depends(get_db)):
    return stock_snapshot(load_state(db).products)


@router.post('/reports/insight')
def insight_report(principal: Principal = Depends(reports_access), db: Session = Depends(get_db)):
    state = load_state(db)
    try:
        provider = get_report_provider()
    except RuntimeError as exc:
        logger.warning('Report provider unavailable: %s', exc)
        return {'report': FALLBACK_REPORT}
    report = generate_business_report(
        provider,
        orders=[order for order in state.orders if order.status != OrderStatus.CANCELED],
        products=state.products,
        customers=state.customers,
    )
    return {'report': report}


@router.get('/goals')
def goals(
    month: str | None = Query(default=None, pattern=MONTH_PATTERN),
    principal: Principal = Depends(goals_access),
    db: Session = Depends(get_db),
):
    state = load_state(db)
    current = month or _current_month()
    return {
        'progress': goal_progress(state.sales_goals, state.orders, current),
        'trend': goal_trend(state.sales_goals, state.orders, _current_month()),
    }


@router.post('/goals')
def save_goal(payload: SalesGoalIn, principal: Principal = Depends(goals_access), db: Session = Depends(get_db)):
    state = load_state(db)
    goal = upsert_goal(
        state.sales_goals,
        month=payload.month,
        wholesale_target=payload.wholesale_target,
        retail_target=payload.retail_target,
    )
    commit_state(db, state, GOALS_KEY)
    return goal
