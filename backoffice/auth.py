from dataclasses import dataclass
from enum import Enum

from fastapi import Depends, HTTPException, Request, status

from backoffice.models import UserRole


class View(str, Enum):
    DASHBOARD = 'DASHBOARD'
    AGENDA = 'AGENDA'
    CUSTOMERS = 'CUSTOMERS'
    SUPPLIERS = 'SUPPLIERS'
    PRODUCTS = 'PRODUCTS'
    INVENTORY = 'INVENTORY'
    NEW_ORDER = 'NEW_ORDER'
    OPEN_ORDERS = 'OPEN_ORDERS'
    PAYMENTS = 'PAYMENTS'
    REPORTS = 'REPORTS'
    GOALS = 'GOALS'
    USERS = 'USERS'


_SHARED_VIEWS = frozenset({View.DASHBOARD, View.AGENDA})

ROLE_VIEWS: dict[UserRole, frozenset[View]] = {
    UserRole.ADMIN: frozenset(View),
    UserRole.SELLER: _SHARED_VIEWS
    | {
        View.NEW_ORDER,
        View.OPEN_ORDERS,
        View.CUSTOMERS,
        View.REPORTS,
        View.PAYMENTS,
        View.GOALS,
    },
    UserRole.STOCK_MANAGER: _SHARED_VIEWS
    | {
        View.PRODUCTS,
        View.INVENTORY,
        View.SUPPLIERS,
        View.REPORTS,
    },
}


@dataclass
class Principal:
    id: str
    username: str
    name: str
    role: UserRole


def has_permission(role: UserRole, view: View) -> bool:
    return view in ROLE_VIEWS.get(role, frozenset())


def allowed_views(role: UserRole) -> list[View]:
    return [view for view in View if has_permission(role, view)]


def get_current_principal(request: Request) -> Principal:
    principal = getattr(request.state, 'principal', None)
    if not principal:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return principal


def require_view(*views: View):
    def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not any(has_permission(principal.role, view) for view in views):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)
        return principal

    return _dep
