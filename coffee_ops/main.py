import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from coffee_ops.core import config
from coffee_ops.core.database import Database
from coffee_ops.core.errors import register_exception_handlers
from coffee_ops.core.logging_setup import configure_logging
from coffee_ops.core.startup_checks import (
    apply_migrations,
    ensure_migrations_applied,
    validate_database_environment,
    validate_jwt_secret,
)
from coffee_ops.middleware.observability import ObservabilityMiddleware
from coffee_ops.routers.auth import router as auth_router
from coffee_ops.routers.categories import router as categories_router
from coffee_ops.routers.internal_metrics import router as internal_metrics_router
from coffee_ops.routers.inventory import router as inventory_router
from coffee_ops.routers.members import router as members_router
from coffee_ops.routers.menu import router as menu_router
from coffee_ops.routers.orders import router as orders_router
from coffee_ops.routers.reservations import router as reservations_router
from coffee_ops.routers.upload import router as upload_router
from coffee_ops.routers.wishlist import router as wishlist_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"


def _startup_tasks(database: Database) -> None:
    try:
        validate_database_environment(database.url)
        validate_jwt_secret(config.JWT_SECRET)
        database.open()
        if database.is_sqlite:
            database.create_all()
        else:
            apply_migrations(alembic_config_path=config.ALEMBIC_CONFIG_PATH, database_url=database.url)
            ensure_migrations_applied(engine=database.engine, alembic_config_path=config.ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


def create_app(database: Optional[Database] = None) -> FastAPI:
    database = database or Database(config.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        _startup_tasks(database)
        yield
        database.close()

    app = FastAPI(
        title="Coffee Shop Ops API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ObservabilityMiddleware)
    register_exception_handlers(app)

    config.UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(config.UPLOADS_DIR)), name="uploads")

    app.include_router(auth_router)
    app.include_router(menu_router)
    app.include_router(categories_router)
    app.include_router(inventory_router)
    app.include_router(orders_router)
    app.include_router(members_router)
    app.include_router(reservations_router)
    app.include_router(wishlist_router)
    app.include_router(upload_router)
    app.include_router(internal_metrics_router)

    @app.get("/")
    def root():
        return {"status": "ok"}

    @app.get("/health")
    def health():
        if not database.is_open or not database.ping():
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "database": "unavailable"},
            )
        return {"status": "healthy", "database": "ok"}

    @app.get("/api/config")
    def client_config():
        return {"useMockApi": config.USE_MOCK_API}

    return app


app = create_app()
