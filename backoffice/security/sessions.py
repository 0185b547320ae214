from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.auth import Principal
from backoffice.config import settings
from backoffice.models import WebSession
from backoffice.schemas import User
from backoffice.services.storage_service import load_users


AUTH_EXEMPT_PATHS = {'/login', '/healthz', '/docs', '/openapi.json'}


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _session_expiry() -> datetime:
    return _now() + timedelta(minutes=settings.session_ttl_minutes)


def create_web_session(db: Session, user_id: str, ip: str | None, user_agent: str | None) -> str:
    token = secrets.token_urlsafe(48)
    web_session = WebSession(
        session_token=token,
        user_id=user_id,
        ip=ip,
        user_agent=user_agent,
        expires_at=_session_expiry(),
    )
    db.add(web_session)
    db.flush()
    return token


def revoke_web_session(db: Session, token: str) -> None:
    session = db.execute(select(WebSession).where(WebSession.session_token == token)).scalar_one_or_none()
    if not session or session.revoked_at is not None:
        return
    session.revoked_at = _now()


def principal_for_user(user: User) -> Principal:
    return Principal(id=user.id, username=user.username, name=user.name, role=user.role)


def load_principal_from_token(db: Session, token: str | None) -> Principal | None:
    if not token:
        return None

    web_session = db.execute(select(WebSession).where(WebSession.session_token == token)).scalar_one_or_none()
    if not web_session:
        return None

    now = _now()
    if web_session.revoked_at is not None or _as_utc(web_session.expires_at) <= now:
        return None

    # Users live in the key-value store; a deleted user loses the session.
    user = next(
        (User.model_validate(raw) for raw in load_users(db) if raw.get('id') == web_session.user_id),
        None,
    )
    if user is None:
        return None

    web_session.last_seen_at = now
    web_session.expires_at = _session_expiry()
    return principal_for_user(user)


def install_auth_session_middleware(app: FastAPI, session_factory) -> None:
    @app.middleware('http')
    async def auth_session_middleware(request: Request, call_next):
        token = request.cookies.get(settings.session_cookie_name)
        with session_factory() as db:
            principal = load_principal_from_token(db, token)
            request.state.principal = principal
            db.commit()

        if request.url.path not in AUTH_EXEMPT_PATHS and request.state.principal is None:
            return JSONResponse({'detail': 'Not authenticated'}, status_code=401)

        return await call_next(request)
