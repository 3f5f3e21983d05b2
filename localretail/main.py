from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from localretail.api.v1 import customer, invoice, product, route, settings as settings_api, sheet, transaction
from localretail.common.error_handlers import register_error_handlers
from localretail.core.config import settings
from localretail.logger_config import logger
from localretail.storage.base import StorageGateway
from localretail.storage.factory import build_storage


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    storage = app.state.storage
    await storage.init()
    logger.info(f"LocalRetail API started ({storage.backend_name} storage, env={settings.APP_ENV})")

    yield

    # Shutdown
    await storage.close()
    logger.info("LocalRetail API shut down")


def create_app(storage: Optional[StorageGateway] = None) -> FastAPI:
    app = FastAPI(title="LocalRetail", version="1.0.0", lifespan=lifespan)
    app.state.storage = storage or build_storage(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Register API routers
    app.include_router(
        customer.router, prefix="/api/v1/customers", tags=["customers"])
    app.include_router(
        product.router, prefix="/api/v1/products", tags=["products"])
    app.include_router(
        route.router, prefix="/api/v1/routes", tags=["routes"])
    app.include_router(
        sheet.router, prefix="/api/v1/sheets", tags=["sheets"])
    app.include_router(
        invoice.router, prefix="/api/v1/invoices", tags=["invoices"])
    app.include_router(
        transaction.router, prefix="/api/v1/transactions", tags=["transactions"])
    app.include_router(
        settings_api.router, prefix="/api/v1/settings", tags=["settings"])

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the LocalRetail APIs!"}

    return app


app = create_app()
