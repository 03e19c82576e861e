from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import List, Optional
import uvicorn

from app.core.config import settings
from app.core.database import create_db_and_tables, close_db
from app.core.errors import ProductError, error_body, resolve_status_code
from app.core.logging import setup_logging
from app.controllers import product_controller
from app.middleware.logging_middleware import LoggingMiddleware
from app.services.image_storage import ImageStorage, get_image_storage
from app.services.product_service import get_product_service
from app.services.protocols import ProductServiceProtocol

logger = setup_logging()

REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")


def format_validation_errors(errors) -> List[str]:
    """Flatten FastAPI validation errors to '<field>: <reason>' messages"""
    messages = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in REQUEST_LOCATIONS]
        field = ".".join(loc) if loc else str(error.get("loc", ("request",))[0])
        messages.append(f"{field}: {error.get('msg')}")
    return messages


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup", environment=settings.environment)
    try:
        await create_db_and_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Application shutdown")
    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error("Error during shutdown", error=str(e))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ProductError)
    async def product_error_handler(request, exc: ProductError):
        status_code = resolve_status_code(exc.code, settings.distinct_error_statuses)
        logger.warning(
            "Product request failed",
            error_code=exc.code.value,
            status_code=status_code,
            detail=exc.message,
            path=request.url.path,
            method=request.method
        )
        return JSONResponse(status_code=status_code, content=error_body(exc, status_code))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc: RequestValidationError):
        messages = format_validation_errors(exc.errors())
        error = ProductError.validation("Validation failed", messages)
        status_code = resolve_status_code(error.code, settings.distinct_error_statuses)
        logger.warning(
            "Request validation failed",
            errors=messages,
            path=request.url.path,
            method=request.method
        )
        return JSONResponse(status_code=status_code, content=error_body(error, status_code))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        logger.warning(
            "HTTP Exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path,
            method=request.method
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "message": exc.detail,
                "success": False,
                "status_code": exc.status_code
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        logger.error(
            "Unhandled Exception",
            error=str(exc),
            path=request.url.path,
            method=request.method
        )
        return JSONResponse(
            status_code=500,
            content={
                "message": "Internal server error",
                "success": False,
                "status_code": 500
            }
        )


def create_app(
    product_service: Optional[ProductServiceProtocol] = None,
    image_storage: Optional[ImageStorage] = None,
) -> FastAPI:
    """Build the API.

    Without arguments the app owns the configured database and upload directory;
    a given service or storage replaces the default dependency.
    """
    owns_resources = product_service is None

    app = FastAPI(
        title="Shop Product API",
        description="Product catalog endpoints with image uploads",
        version="1.0.0",
        lifespan=lifespan if owns_resources else None,
        docs_url="/docs" if settings.environment == "local" else None,
        redoc_url="/redoc" if settings.environment == "local" else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    if product_service is not None:
        app.dependency_overrides[get_product_service] = lambda: product_service
    if image_storage is not None:
        app.dependency_overrides[get_image_storage] = lambda: image_storage

    app.include_router(product_controller.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        return {
            "message": "Shop Product API is running",
            "version": "1.0.0",
            "environment": settings.environment,
            "docs_url": "/docs" if settings.environment == "local" else "Documentation disabled in production"
        }

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "environment": settings.environment,
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8088,
        reload=settings.environment == "local",
        log_config=None
    )
