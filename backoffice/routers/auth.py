from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from backoffice.auth import Principal, allowed_views, get_current_principal
from backoffice.config import settings
from backoffice.db import get_db
from backoffice.dependencies import get_client_ip
from backoffice.schemas import LoginIn
from backoffice.security.sessions import create_web_session, principal_for_user, revoke_web_session
from backoffice.services.state_service import load_state
from backoffice.services.user_service import authenticate

router = APIRouter(tags=['auth'])
logger = logging.getLogger(__name__)


@router.post('/login')
def login_submit(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    state = load_state(db)
    user = authenticate(state, payload.username, payload.password)
    if user is None:
        db.commit()
        logger.warning('Failed login for %s from %s', payload.username, get_client_ip(request))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid username or password')

    token = create_web_session(
        db,
        user.id,
        ip=get_client_ip(request),
        user_agent=request.headers.get('user-agent'),
    )
    db.commit()

    principal = principal_for_user(user)
    response = JSONResponse(
        {
            'id': principal.id,
            'username': principal.username,
            'name': principal.name,
            'role': principal.role.value,
            'views': [view.value for view in allowed_views(principal.role)],
        }
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        max_age=settings.session_ttl_minutes * 60,
    )
    return response


@router.post('/logout')
def logout(request: Request, db: Session = Depends(get_db)):
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        revoke_web_session(db, token)
    db.commit()

    response = JSONResponse({'ok': True})
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get('/me')
def me(principal: Principal = Depends(get_current_principal)):
    return {
        'id': principal.id,
        'username': principal.username,
        'name': principal.name,
        'role': principal.role,
        'views': allowed_views(principal.role),
    }
