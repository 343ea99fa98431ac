import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.core.config import get_settings
from storefront.core.logging import configure_logging
from storefront.core.middleware import SecurityHeadersMiddleware, global_exception_handler, log_requests
from storefront.db.create_tables import create_all
from storefront.repositories.catalog_seed import seed_catalog
from storefront.repositories.sql_repository import SQLRepository
from storefront.routers import admin as admin_router
from storefront.routers import articles as articles_router
from storefront.routers import auth as auth_router
from storefront.routers import cart as cart_router
from storefront.routers import categories as categories_router
from storefront.routers import checkout as checkout_router
from storefront.routers import contact as contact_router
from storefront.routers import currency as currency_router
from storefront.routers import products as products_router
from storefront.routers import wishlist as wishlist_router

logger = logging.getLogger(__name__)


def _prepare_database() -> None:
    settings = get_settings()
    create_all()
    repo = SQLRepository()
    if settings.seed_on_startup:
        seed_catalog(repo)
    now = datetime.now(timezone.utc)
    expired = repo.delete_expired_sessions(now)
    stale = repo.delete_stale_session_carts(now - timedelta(seconds=settings.cart_ttl_seconds))
    if expired or stale:
        logger.info("Purged %s expired session(s) and %s stale cart(s)", expired, stale)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _prepare_database()
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Storefront API", lifespan=lifespan)

    allowed_cors = {settings.public_base_url, *settings.cors_origins}
    if settings.app_env != "prod":
        allowed_cors.update(
            {
                "http://localhost:5000",
                "http://127.0.0.1:5000",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            }
        )
    allowed_cors = {origin for origin in allowed_cors if origin}
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.middleware("http")(log_requests)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(products_router.router)
    app.include_router(categories_router.router)
    app.include_router(articles_router.router)
    app.include_router(cart_router.router)
    app.include_router(wishlist_router.router)
    app.include_router(checkout_router.router)
    app.include_router(currency_router.router)
    app.include_router(auth_router.router)
    app.include_router(admin_router.router)
    app.include_router(contact_router.router)

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
