from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from app.database.database import engine, Base, SessionLocal

# Import middleware
from app.common.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

# Import routers
from app.modules.auth.router import auth_router
from app.modules.customers.router import router as customers_router
from app.modules.products.router import product_router
from app.modules.invoices.router import router as invoices_router
from app.modules.settings.router import router as settings_router
from app.modules.settings.service import SettingsService

# Import models for table creation
import app.modules.auth.models
import app.modules.customers.models
import app.modules.products.models
import app.modules.invoices.models
import app.modules.settings.models

from app.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="Invoice Desk API",
    description="Invoicing API for customers, products, GST invoices and payments",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(customers_router)
app.include_router(product_router)
app.include_router(invoices_router)
app.include_router(settings_router)


@app.get("/")
async def read_root():
    return {
        "message": "Invoice Desk API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


@app.on_event("startup")
def startup_event():
    logger.info("Invoice Desk API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    # The test suite manages its own schema
    if settings.ENVIRONMENT == "test":
        return

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        SettingsService(db).ensure_defaults()
    finally:
        db.close()


@app.on_event("shutdown")
def shutdown_event():
    logger.info("Invoice Desk API shutting down...")
