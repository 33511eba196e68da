"""
FastAPI application factory and entry point.

create_app() builds and configures the application:
  1. Logging — configured from settings before anything else runs
  2. Collaborators — the card codec and the token issuer, each constructed
     from its own key and stored on app.state
  3. Lifespan manager — creates tables on startup, disposes the engine on shutdown
  4. CORS middleware — allows the configured frontend origins
  5. Exception handlers — maps domain errors to HTTP responses
  6. Routers — /api/auth, /api/card, /api/admin

A malformed CARD_CODEC_KEY raises CodecConfigurationError inside
create_app(), so the process fails at import instead of serving requests
that can't decode a single card.

Running locally:
    uvicorn cardbank.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardbank.codec import CardNumberCodec
from cardbank.config import Settings, settings
from cardbank.database import engine, Base
from cardbank.exceptions import register_exception_handlers
from cardbank.logging_config import setup_logging
from cardbank.routers import admin, auth, cards
from cardbank.security import TokenIssuer

# Register every model on Base.metadata before create_all()
import cardbank.models  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
      Creates all database tables if they don't exist. Production deployments
      would manage the schema with migrations instead.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started", app.title, app.version)
    yield
    await engine.dispose()


def create_app(config: Settings = settings) -> FastAPI:
    """Build the application from explicit configuration."""
    setup_logging(config.LOG_LEVEL, config.LOG_FORMAT)

    app = FastAPI(
        title=config.APP_NAME,
        version=config.APP_VERSION,
        description="Card banking API: card listing, blocking and transfers between own cards",
        lifespan=lifespan,
    )

    app.state.codec = CardNumberCodec(config.CARD_CODEC_KEY)
    app.state.token_issuer = TokenIssuer(
        secret_key=config.SECRET_KEY,
        algorithm=config.ALGORITHM,
        expire_minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES,
    )

    app.state.auth_cookie_name = config.AUTH_COOKIE_NAME
    app.state.auth_cookie_secure = not config.DEBUG

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(cards.router, prefix="/api/card", tags=["Cards"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Liveness check for load balancers and orchestrators."""
        return {"status": "ok", "version": config.APP_VERSION}

    return app


app = create_app()
