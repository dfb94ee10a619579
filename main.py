import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.database import build_database, init_db
from app.core.exceptions import MarketplaceError
from app.core.logging_config import setup_logging
from app.core.middleware import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    RequestTimeoutMiddleware,
    request_id_var,
)
from app.api.endpoints import auth, bids, health, jobs

setup_logging(settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    The Database (engine + pool) lives exactly as long as the app.
    """
    # Startup
    logger.info(f"Starting up {settings.PROJECT_NAME} ({settings.ENVIRONMENT})...")
    database = build_database()
    init_db(database)
    app.state.database = database
    logger.info("Database initialized successfully")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.PROJECT_NAME}...")
    database.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to JSON error responses of the form {"message": ...}.

    Internal details (driver errors, token failure reasons) are logged,
    never returned.
    """

    @app.exception_handler(MarketplaceError)
    async def handle_marketplace_error(request: Request, exc: MarketplaceError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(f"[{rid}] {type(exc).__name__}: {exc.message} {exc.context}")
        else:
            logger.warning(f"[{rid}] {type(exc).__name__}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message, "request_id": rid},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=400,
            content={
                "message": "Invalid request",
                "errors": jsonable_encoder(exc.errors()),
                "request_id": rid,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail, "request_id": request_id_var.get("")},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.exception(f"[{rid}] Unhandled error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"message": "An unexpected error occurred", "request_id": rid},
        )


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Job bidding marketplace: job postings, bids and cookie sessions",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Middleware added last runs first: CORS -> request id -> logging -> timeout
app.add_middleware(RequestTimeoutMiddleware, timeout=settings.REQUEST_TIMEOUT_SECONDS)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(jobs.router)
app.include_router(bids.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=not settings.is_production,
        log_level="info"
    )
