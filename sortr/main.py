from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from sqlalchemy.engine import make_url
import logging
import os

from sortr.config import Settings, load_settings
from sortr.database import Base, make_engine, make_session_factory
import sortr.models  # noqa: F401 - register all models
from sortr.errors import register_exception_handlers
from sortr.ratelimit import RateLimiter
from sortr.services.user_service import ensure_bootstrap_admin
from sortr.routers import health, auth, users, locations, boxes, items, categories
from sortr.routers import activities, shares, notifications, comments, export, qr, stats, expiration, suggestions

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, production: bool = False):
        super().__init__(app)
        self.production = production

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if self.production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


def _ensure_sqlite_dir(url: str) -> None:
    path = make_url(url).database
    if url.startswith("sqlite") and path and path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def _lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(application: FastAPI):
        engine = application.state.engine
        # Tables are created here for dev mode; deployments run alembic
        _ensure_sqlite_dir(settings.DATABASE_URL)
        os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
        Base.metadata.create_all(bind=engine)

        if settings.FIRST_ADMIN_USER and settings.FIRST_ADMIN_PASS:
            with application.state.session_factory() as db:
                ensure_bootstrap_admin(db, settings.FIRST_ADMIN_USER, settings.FIRST_ADMIN_PASS)

        logger.info("Sortr started (%s)", settings.APP_ENV)
        yield
        engine.dispose()

    return lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Sortr",
        description="Home inventory tracker: locations, boxes and items",
        version="1.0.0",
        lifespan=_lifespan(settings),
    )
    app.state.settings = settings
    app.state.engine = make_engine(settings.DATABASE_URL)
    app.state.session_factory = make_session_factory(app.state.engine)
    app.state.rate_limiter = RateLimiter(
        settings.RATE_LIMIT_MAX_ATTEMPTS,
        settings.RATE_LIMIT_WINDOW_SECONDS,
        enabled=not settings.is_test,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, production=settings.APP_ENV == "production")
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(locations.router)
    app.include_router(boxes.router)
    app.include_router(items.router)
    app.include_router(categories.router)
    app.include_router(activities.router)
    app.include_router(shares.router)
    app.include_router(notifications.router)
    app.include_router(comments.router)
    app.include_router(export.router)
    app.include_router(qr.router)
    app.include_router(stats.router)
    app.include_router(expiration.router)
    app.include_router(suggestions.router)
    return app


app = create_app()
