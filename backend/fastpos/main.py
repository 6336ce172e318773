"""
FastPOS - Backend API
Punto de venta con cierre de caja en USD y bolívares

Author: TM3
Date: 2026-10-19
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from fastpos.api import backup, exchange_rate, expenses, products, reports, sales, sync
from fastpos.core.config import Settings, settings as default_settings
from fastpos.services.pos import PointOfSale, create_point_of_sale

logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(pos: Optional[PointOfSale] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        pos: Already started PointOfSale (tests). When None, one is built
            from settings on startup and shut down on exit.
        settings: Settings (defaults to the environment)
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = pos is None
        app.state.pos = create_point_of_sale(settings).start() if owned else pos
        try:
            yield
        finally:
            if owned:
                logger.info("Shutting down POS, flushing remote writes")
                app.state.pos.shutdown()

    app = FastAPI(
        title=settings.API_TITLE,
        version=settings.API_VERSION,
        description=settings.API_DESCRIPTION,
        lifespan=lifespan,
    )
    if pos is not None:
        app.state.pos = pos

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
    app.include_router(sales.router, prefix="/api/v1/sales", tags=["Sales"])
    app.include_router(expenses.router, prefix="/api/v1/expenses", tags=["Expenses"])
    app.include_router(reports.router, prefix="/api/v1/reports", tags=["Reports"])
    app.include_router(exchange_rate.router, prefix="/api/v1/exchange-rate", tags=["Exchange Rate"])
    app.include_router(backup.router, prefix="/api/v1/backup", tags=["Backup"])
    app.include_router(sync.router, prefix="/api/v1/sync", tags=["Sync"])

    @app.get("/")
    async def root():
        """Endpoint raíz - Verificación de estado de la API"""
        return {
            "message": "FastPOS API",
            "status": "online",
            "version": settings.API_VERSION,
        }

    @app.get("/health")
    async def health():
        """Health check - the POS is usable offline, so only a missing POS is unhealthy"""
        current = getattr(app.state, "pos", None)
        if current is None:
            return {"status": "starting", "service": "fastpos-api", "version": settings.API_VERSION}

        sync_status = current.sync.get_status()
        return {
            "status": "healthy" if sync_status['status'] != "offline" else "degraded",
            "service": "fastpos-api",
            "version": settings.API_VERSION,
            "sync": sync_status,
            "exchange_rate": float(current.rates.rate),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "fastpos.main:app",
        host=default_settings.API_HOST,
        port=default_settings.API_PORT,
        reload=default_settings.API_DEBUG,
    )
