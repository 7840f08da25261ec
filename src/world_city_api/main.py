import logging
import os
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DataError, IntegrityError, OperationalError, SQLAlchemyError

from . import database
from .constants import ErrorCode
from .exceptions import CityNotFoundError
from .routers import cities

logger = logging.getLogger(__name__)


def configure_logging():
    """Applies LOG_LEVEL to the root logger, however the app is served."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level)
    logging.getLogger().setLevel(level)


configure_logging()

PORT = int(os.getenv("PORT", 8080))


@asynccontextmanager
async def lifespan(_: FastAPI):
    # One engine per process, created on startup and disposed on shutdown
    database.init_engine()
    logger.info("World City API starting up...")
    try:
        yield
    finally:
        await database.dispose_engine()
        logger.info("World City API shutting down...")


app = FastAPI(
    title="World City API",
    description="CRUD API over the city table of the world database.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
origins = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],    # Allow all methods (GET, POST, PUT, DELETE, etc.)
    allow_headers=["*"],
)
# --- End CORS Middleware ---


app.include_router(cities.router)  # Handles /city


@app.get("/")
async def read_root():
    """
    Root endpoint providing a welcome message.
    Useful for basic connectivity checks.
    """
    return {"message": "World City API"}

@app.get("/health")
async def health_check():
    """
    Health check endpoint to ensure the API is running.
    """
    return {"status": "ok"}


# --- Exception Handlers ---

@app.exception_handler(CityNotFoundError)
async def city_not_found_handler(request: Request, exc: CityNotFoundError):
    return JSONResponse(
        status_code=404,
        content={"error": ErrorCode.CITY_NOT_FOUND.value},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Reject malformed bodies (missing fields, non-numeric or negative population) with 400."""
    logger.warning(
        f"Validation error on {request.method} {request.url}: {exc.errors()}"
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": ErrorCode.VALIDATION_ERROR.value,
            "detail": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Handle constraint violations, e.g. a city ID claimed by a concurrent insert."""
    logger.warning(
        f"Database integrity error on {request.method} {request.url}: {exc.orig}"
    )
    return JSONResponse(
        status_code=409,
        content={
            "error": ErrorCode.INTEGRITY_ERROR.value,
            "detail": "Database constraint violation",
        },
    )


@app.exception_handler(DataError)
async def data_error_handler(request: Request, exc: DataError):
    """Handle values the database rejects (out of range, too long)."""
    logger.warning(
        f"Database data error on {request.method} {request.url}: {exc.orig}"
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": ErrorCode.DATA_ERROR.value,
            "detail": "Invalid data format for database field",
        },
    )


@app.exception_handler(OperationalError)
async def operational_error_handler(request: Request, exc: OperationalError):
    """Handle connectivity loss and timeouts."""
    logger.error(
        f"Database operational error on {request.method} {request.url}: {exc}\n"
        f"{traceback.format_exc()}"
    )
    return JSONResponse(
        status_code=503,
        content={
            "error": ErrorCode.OPERATIONAL_ERROR.value,
            "detail": "Database temporarily unavailable",
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        f"Unhandled database error on {request.method} {request.url}: {exc}\n"
        f"{traceback.format_exc()}"
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": type(exc).__name__,
            "detail": "Internal server error",
        },
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
