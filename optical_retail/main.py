"""
Optical Retail FastAPI Main Application
Entry point for the audit REST API
"""
import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from optical_retail.api.v1.api_router import api_router
from optical_retail.core.config import settings
from optical_retail.core.database import check_db_connection, init_db
from optical_retail.core.exceptions import TenantAccessError
from optical_retail.core.logging import setup_logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## Optical Retail Audit API

    Inventory audits for multi-tenant optical shops.

    ### Key Features:
    - **Inventory counts**: expected stock is snapshotted from live stock
    - **Financial reconciliation**: gross sales, cost of goods sold, profit margin
    - **Category breakdown**: frame/lens revenue split by cost share
    - **Expenses**: optional deduction of bills and salaries
    """,
    docs_url=settings.DOCS_URL,
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
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unavailable")


# System information endpoint
@app.get("/info", tags=["System"])
async def system_info():
    return {
        "application": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "api_version": "v1",
        "docs_url": settings.DOCS_URL,
    }


@app.on_event("startup")
async def startup_event():
    """
    Application startup tasks

    Verify the database and create missing tables
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    if not check_db_connection():
        logger.error("Failed to connect to database on startup")
        raise RuntimeError("Database connection failed")

    init_db()
    logger.info("Application startup completed successfully")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down application")


@app.exception_handler(TenantAccessError)
async def tenant_access_handler(request, exc: TenantAccessError):
    return JSONResponse(status_code=403, content={"detail": exc.message, "type": "tenant_access"})


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
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
            "type": "server_error"
        }
    )


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "optical_retail.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
