"""
Teashop - Bubble tea ordering back end
FastAPI Application Entry Point
"""
import uvicorn
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from teashop import __version__
from teashop.core import settings, engine, Base
from teashop.core.exceptions import TeashopError
from teashop.core.logging_config import setup_logging
from teashop.api import api_router

# Register tables on Base.metadata
import teashop.models  # noqa: F401

logger = logging.getLogger(__name__)

# Lifespan for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Startup: Create tables if not exist
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.APP_NAME} starting on port {settings.APP_PORT}")

    if not settings.MOLLIE_API_KEY:
        logger.warning("MOLLIE_API_KEY not set, payment endpoints will fail")
    if not settings.BREVO_API_KEY:
        logger.warning("BREVO_API_KEY not set, confirmation mails are disabled")

    yield

    logger.info(f"{settings.APP_NAME} shutting down")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Checkout, Mollie payments, loyalty points and order confirmations",
    version=__version__,
    lifespan=lifespan
)

@app.exception_handler(TeashopError)
async def teashop_error_handler(request: Request, exc: TeashopError):
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

# Include routers
app.include_router(api_router, prefix="/api")

# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "app": settings.APP_NAME}

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.APP_PORT,
        reload=settings.DEBUG
    )
