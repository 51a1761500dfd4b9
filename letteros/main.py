# letteros/main.py
import asyncio
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager, suppress
from letteros.config import settings
from letteros.middleware.cors import setup_cors
from letteros.database.connection import DatabaseConnection
from letteros.services.launch_content_service import launch_content_service, run_outbox_reconciler

import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting LetterOS API...")
    try:
        await DatabaseConnection.get_pool()
        logger.info("Database connection pool initialized")
    except Exception as e:
        if settings.environment == "development":
            logger.warning(f"Database connection failed (development mode): {e}")
        else:
            logger.error(f"Failed to initialize database: {e}")
            raise

    try:
        await launch_content_service.reconcile()
    except Exception as e:
        logger.warning(f"Startup outbox reconcile failed: {e}")

    reconciler = asyncio.create_task(
        run_outbox_reconciler(launch_content_service, settings.outbox_reconcile_interval_seconds)
    )

    yield

    # Shutdown
    logger.info("Shutting down LetterOS API...")
    reconciler.cancel()
    with suppress(asyncio.CancelledError):
        await reconciler
    try:
        await DatabaseConnection.close_pool()
        logger.info("Database connections closed")
    except Exception as e:
        logger.warning(f"Error closing database connections: {e}")

app = FastAPI(
    title="LetterOS API",
    description="AI-assisted newsletter planning, writing and delivery",
    version="1.0.0",
    lifespan=lifespan
)

# Setup CORS
setup_cors(app)

from letteros.auth.routes import router as auth_router
app.include_router(auth_router)

from letteros.routes.launch_content import router as launch_content_router
app.include_router(launch_content_router)

from letteros.routes.newsletters import router as newsletters_router
app.include_router(newsletters_router)

from letteros.routes.subscribers import router as subscribers_router
app.include_router(subscribers_router)

from letteros.routes.ai import router as ai_router
app.include_router(ai_router)

from letteros.routes.dashboard import router as dashboard_router
app.include_router(dashboard_router)

@app.get("/")
async def root():
    return {"message": "LetterOS API", "status": "healthy"}

@app.get("/health")
async def health_check():
    """Health check including database"""
    try:
        pool = await DatabaseConnection.get_pool()
        async with pool.acquire() as conn:
            await conn.fetchval('SELECT 1')
        db_healthy = True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_healthy = False

    return {
        "status": "healthy" if db_healthy else "degraded",
        "environment": settings.environment,
        "database_healthy": db_healthy,
        "ai_configured": bool(settings.gemini_api_key),
        "pending_outbox": len(launch_content_service.outbox.pending())
    }

# Error responses are {"error": ..., "details"?: ...}

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request data", "details": jsonable_encoder(exc.errors())}
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )
