"""
FastAPI application factory.

This module creates and configures the FastAPI application with all
routes, middleware, error handlers and lifecycle management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from storage.database import db

from .config import get_settings
from .errors import NannyMatchError
from .routes import counts_router, jobs_router, notifications_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager for startup and shutdown tasks.

    Connects to the database and creates tables on startup.
    """
    try:
        logger.info("Starting up application...")
        if not db.is_initialized:
            db.init_db(get_settings().database_url)
        db.create_tables()
        logger.info("Application startup complete")

        yield

    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise
    finally:
        logger.info("Shutting down application...")


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(messages) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Render every failure as {"error": message}."""

    @app.exception_handler(NannyMatchError)
    async def handle_service_error(request: Request, exc: NannyMatchError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(HTTPException)
    async def handle_http_error(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Nanny Match Service",
        description="Matches childcare job requests to available freelancers",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.get("/", response_model=dict)
    async def root():
        return {
            "name": "Nanny Match Service",
            "description": "Matches childcare job requests to available freelancers",
            "endpoints": {
                "POST /jobs": "Create a job and notify matching freelancers",
                "POST /jobs/{id}/confirm": "Confirm availability during the window",
                "POST /jobs/{id}/accept-open-job": "Accept a job after its window closed",
                "GET /jobs/{id}/confirmed": "List available freelancers",
                "POST /jobs/{id}/select": "Lock the job to one freelancer",
                "POST /jobs/{id}/decline": "Decline a freelancer",
                "POST /jobs/{id}/restart": "Restart the search",
                "GET /jobs/{id}": "Fetch a job",
                "GET /notifications": "Freelancer notification feed",
                "GET /confirmations/count": "Client confirmation counter",
            },
        }

    @app.get("/health", response_model=dict)
    async def health():
        return {"ok": True}

    app.include_router(jobs_router)
    app.include_router(notifications_router)
    app.include_router(counts_router)

    return app
