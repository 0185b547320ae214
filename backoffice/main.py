import logging
from collections.abc import Iterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session, sessionmaker

from backoffice.config import settings
from backoffice.db import SessionLocal, get_db, init_db
from backoffice.routers import agenda, auth, catalog, orders, reports, users
from backoffice.security.sessions import install_auth_session_middleware

TEMPLATE_DIR = Path(__file__).resolve().parent / 'templates'

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)


def create_app(session_factory: sessionmaker = SessionLocal) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_: FastAPI):
        init_db(session_factory.kw['bind'])
        yield

    app = FastAPI(title='Back Office', lifespan=lifespan)
    app.state.templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

    if session_factory is not SessionLocal:

        def _get_db() -> Iterator[Session]:
            with session_factory() as db:
                yield db

        app.dependency_overrides[get_db] = _get_db

    install_auth_session_middleware(app, session_factory)

    app.include_router(auth.router)
    app.include_router(orders.router)
    app.include_router(catalog.router)
    app.include_router(agenda.router)
    app.include_router(reports.router)
    app.include_router(users.router)

    @app.get('/healthz')
    def healthz():
        return {'ok': True}

    return app


app = create_app()
