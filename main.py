"""
Todo API application entry point.

Run with ``python main.py`` or ``uvicorn main:create_app --factory``.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from api.middleware import register_error_handlers, register_middleware
from api.rate_limit import FixedWindowLimiter
from api.routes import router as todo_router
from auth.jwt import TokenIssuer
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from auth.service import AuthService
from config.settings import Settings
from database.session import build_engine, build_session_factory, init_models
from database.todos import TodoStore
from database.users import UserStore
from utils.uploads import UPLOADS_URL_PREFIX, ImageStorage

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s - %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "multipart", "aiosqlite"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application; ``settings`` defaults to the environment."""
    settings = settings or Settings()
    configure_logging(settings)

    app = FastAPI(
        title="Todo API",
        version="1.0.0",
        description="Todo lists for guests and registered users.",
    )

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    tokens = TokenIssuer(settings)
    images = ImageStorage(settings)
    images.ensure_directory()

    app.state.settings = settings
    app.state.engine = engine
    app.state.token_issuer = tokens
    app.state.auth_service = AuthService(UserStore(session_factory), PasswordHasher(settings), tokens)
    app.state.todo_store = TodoStore(session_factory, settings)
    app.state.image_storage = images
    app.state.auth_limiter = FixedWindowLimiter(settings)

    register_middleware(app)
    register_error_handlers(app)

    # CORS, outermost
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes
    app.include_router(auth_router, prefix="/auth")
    app.include_router(todo_router)
    app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=str(images.directory)), name="uploads")

    @app.on_event("startup")
    async def on_startup():
        logger.info("Creating database tables…")
        await init_models(engine)
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await engine.dispose()

    return app


if __name__ == "__main__":
    config = Settings()
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
