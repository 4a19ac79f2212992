from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.api.router import api_router
from app.db.async_session import startup_async_database, shutdown_async_database
from app.services.async_error_handler import AsyncErrorHandler

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.PROJECT_DESCRIPTION,
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    redirect_slashes=False,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{datetime.now(timezone.utc).isoformat()} - {request.method} {request.url.path}")
    return await call_next(request)


# Every error leaves the API as {"error": message}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and detail == "Not Found":
        detail = "Route not found"
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "details": jsonable_errors(exc)},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    http_exc = AsyncErrorHandler.handle_error(exc, f"{request.method} {request.url.path}")
    return JSONResponse(status_code=http_exc.status_code, content={"error": http_exc.detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the non-serialisable ``ctx``/``input`` payloads."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


app.include_router(api_router, prefix=settings.API_PREFIX)

@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup."""
    try:
        logger.info(f"Starting up {settings.PROJECT_NAME}...")
        await startup_async_database()
        logger.info(f"{settings.PROJECT_NAME} startup completed successfully")
    except Exception as e:
        logger.error(f"Failed to start up application: {e}")
        raise

@app.on_event("shutdown")
async def shutdown_event():
    """Clean up services on application shutdown."""
    logger.info(f"Shutting down {settings.PROJECT_NAME}...")
    await shutdown_async_database()
    logger.info(f"{settings.PROJECT_NAME} shutdown completed successfully")

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": f"Welcome to {settings.PROJECT_NAME}"}
