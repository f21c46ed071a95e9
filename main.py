import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings
from app.core.errors import register_error_handlers
from app.database import Base, build_engine, build_session_factory
from app.services.google_auth import GoogleTokenVerifier
from app.services.marketplace import MarketplaceFeed, MetadataFetcher
from app.services.solana import SolanaRpcClient

# import models so they are registered on the metadata
import app.models  # noqa: F401

from app.routes.auth import router as auth_router
from app.routes.users import router as users_router
from app.routes.collections import router as collections_router
from app.routes.products import router as products_router
from app.routes.sizes import router as sizes_router
from app.routes.nfts import router as nfts_router
from app.routes.listings import router as listings_router
from app.routes.marketplace import router as marketplace_router
from app.routes.wallets import router as wallets_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables (after models are imported)
    Base.metadata.create_all(bind=app.state.engine)
    logger.info("Database tables ready")
    yield
    app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application and everything it depends on from one Settings object"""
    settings = settings or Settings.from_env()

    app = FastAPI(title="Couture Marketplace API", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.google_verifier = GoogleTokenVerifier(settings.google_client_id)
    app.state.rpc_client = SolanaRpcClient(settings.solana_rpc_url, timeout=settings.http_timeout_seconds)
    app.state.marketplace_feed = MarketplaceFeed(MetadataFetcher(timeout=settings.http_timeout_seconds))

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url] if settings.client_url else ["*"],
        allow_credentials=bool(settings.client_url),
        allow_methods=["*"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_error_handlers(app)

    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(users_router, prefix="/api", tags=["users"])
    app.include_router(collections_router, prefix="/api", tags=["collections"])
    app.include_router(products_router, prefix="/api", tags=["products"])
    app.include_router(sizes_router, prefix="/api", tags=["sizes"])
    app.include_router(nfts_router, prefix="/api", tags=["nfts"])
    app.include_router(listings_router, prefix="/api", tags=["listings"])
    app.include_router(marketplace_router, prefix="/api", tags=["marketplace"])
    app.include_router(wallets_router, prefix="/api", tags=["wallets"])

    @app.get("/")
    def read_root():
        return {"status": "ok"}

    return app


app = create_app()
