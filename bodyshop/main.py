"""
Bodyshop Operations FastAPI Main Application
Entry point for the workshop operations REST API
"""
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import sys

from bodyshop.core.config import settings
from bodyshop.core.database import check_db_connection, init_db
from bodyshop.core.logging import get_logger
from bodyshop.api.v1.api_router import api_router

logger = get_logger("api")

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## Bodyshop Operations API

    Job, inventory and spare-part flow for a body-repair workshop.

    ### Key Features:
    - **FIFO Part Allocation**: earliest intake gets the first claim on scarce stock
    - **Workshop Boards**: claims control, booking candidates, part monitoring, production status
    - **Stock Issuance**: part and material issues committed in one transaction
    - **Inventory Master**: spare parts and materials, receipts and stock counts
    """,
    docs_url=settings.DOCS_URL,
    redoc_url=settings.REDOC_URL,
    openapi_url=settings.OPENAPI_URL,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add trusted host middleware for production
if not settings.DEBUG:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS
    )


# Health check endpoint
@app.get("/health", tags=["System"])
async def health_check():
    """
    Health check endpoint for monitoring and load balancers

    Returns system status and database connectivity
    """
    try:
        db_status = check_db_connection()

        return {
            "status": "healthy" if db_status else "degraded",
            "version": settings.APP_VERSION,
            "database": "connected" if db_status else "disconnected",
            "debug": settings.DEBUG
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")


# System information endpoint
@app.get("/info", tags=["System"])
async def system_info():
    """
    System information endpoint
    """
    return {
        "application": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "api_version": "v1",
        "docs_url": settings.DOCS_URL,
        "currency": settings.DEFAULT_CURRENCY,
        "features": [
            "FIFO Part Allocation",
            "Claims Control Board",
            "Booking Candidates",
            "Part Monitoring",
            "Production Part Status",
            "Stock Issuance",
        ],
    }


# Application startup event
@app.on_event("startup")
async def startup_event():
    """
    Application startup tasks

    Verify the database connection and create missing tables
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        if not check_db_connection():
            logger.error("Failed to connect to database on startup")
            raise RuntimeError("Database connection failed")

        logger.info("Database connection established")
        init_db()
        logger.info("Application startup completed successfully")

    except Exception as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)


# Application shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down application")


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Global exception handler for unhandled errors

    Args:
        request: FastAPI request object
        exc: Exception that occurred

    Returns:
        JSON error response
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
            "type": "server_error"
        }
    )


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bodyshop.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
