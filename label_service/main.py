"""
QR Label Sheet Service - FastAPI Application Entry Point
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from label_service import __version__
from label_service.config import settings
from label_service.database import close_store, get_store
from label_service.errors import LabelServiceError
from label_service.logger import get_logger, configure_logging
from label_service.models.common import ErrorResponse

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("QR Label Sheet Service starting", extra={
        "environment": settings.environment,
        "log_level": settings.log_level,
        "db_path": settings.db_path,
        "label_profile": settings.label_profile,
        "code_width": settings.code_width
    })

    get_store()

    yield

    close_store()
    logger.info("QR Label Sheet Service shutting down")


app = FastAPI(
    title="QR Label Sheet Service",
    description="Sequential code allocation and QR label sheet printing",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LabelServiceError)
async def label_service_exception_handler(request: Request, exc: LabelServiceError):
    """Translate core error kinds to HTTP responses."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log("Request failed", extra={
        "path": request.url.path,
        "method": request.method,
        "kind": exc.kind,
        "error_code": exc.error_code,
        "error": exc.message
    })

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            details=exc.details
        ).model_dump(mode="json")
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error("Unhandled exception", extra={
        "path": request.url.path,
        "method": request.method,
        "error": str(exc)
    }, exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error_code="INTERNAL_ERROR",
            message="An unexpected error occurred",
            details={"error": str(exc)} if settings.is_development else {}
        ).model_dump(mode="json")
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.environment
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "QR Label Sheet Service",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


from label_service.routes.label_generation_routes import router as label_generation_router

app.include_router(label_generation_router, prefix="/api", tags=["labels"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "label_service.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level
    )
