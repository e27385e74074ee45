"""
StockDesk - Main FastAPI Application
"""
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.database import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Product catalog and inventory with bulk import",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.on_event("startup")
def create_tables():
    """Create missing tables so a fresh database is usable without migrations."""
    try:
        init_db()
        logger.info("Database tables ready (%s)", "sqlite" if settings.is_sqlite else "postgresql")
    except Exception as e:
        logger.exception("Database initialisation failed: %s", e)
        raise


# Import and include routers
from app.api import product_import_router, products_router, catalog_router

app.include_router(product_import_router, prefix="/api/products", tags=["Product Import"])
app.include_router(products_router, prefix="/api/products", tags=["Products"])
app.include_router(catalog_router, prefix="/api", tags=["Catalog"])

# Serve uploaded files (product images)
_UPLOADS_DIR = Path(settings.UPLOADS_DIR)
_UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(_UPLOADS_DIR)), name="uploads")
