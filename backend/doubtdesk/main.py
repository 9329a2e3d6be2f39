"""
DoubtDesk - Main FastAPI Application
"""

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from .config import settings
from .api import doubts_router, sessions_router
from .core.logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .storage import LocalStorage, init_session_store, init_limit_storage

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire logging and the shared stores before serving requests."""
    setup_logging(settings)

    storage = LocalStorage(settings.local_storage_path)
    init_session_store(storage)
    init_limit_storage(storage)

    logger.info(
        f"{settings.app_name} v{settings.app_version} up: storage={storage.root}, "
        f"llm={settings.llm_provider}, daily_limit={settings.doubt_daily_limit}, debug={settings.debug}"
    )
    yield
    logger.info(f"{settings.app_name} stopped")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="AI doubt resolution for JEE/NEET students",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware (after CORS)
if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(doubts_router)
app.include_router(sessions_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as {"error": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=422, content={"error": f"Invalid request: {errors}"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": f"Internal Error: {exc}"})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "message": "Welcome to DoubtDesk - Ask your doubts anytime"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "storage": settings.storage_type,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "doubtdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
