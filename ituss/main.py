"""iTuss Broker - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ituss.config import settings
from ituss.errors import AuthenticationError, BrokerError
from ituss.schemas.auth import ErrorResponse
from ituss.services.broker import Broker, build_broker

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def broker_error_handler(request: Request, exc: BrokerError) -> JSONResponse:
    if isinstance(exc, AuthenticationError):
        logger.warning("%s %s unauthenticated: %s", request.method, request.url.path, type(exc).__name__)
    elif exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return _error_response(exc.status_code, exc.public_message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())[1:])
        problems.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return _error_response(400, "; ".join(problems) or "Invalid request body")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s crashed: %s", request.method, request.url.path, exc)
    return _error_response(500, "Internal server error")


def create_app(broker: Broker | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the credential store on startup, close it on shutdown."""
        logging.basicConfig(level=settings.log_level.upper())
        if app.state.broker is None:
            app.state.broker = build_broker(settings)
        app.state.broker.open()

        yield

        app.state.broker.close()

    app = FastAPI(
        title="iTuss Broker",
        description="Device pairing and media session credentials for iTuss live viewing",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.broker = broker

    # CORS - viewer apps run on other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BrokerError, broker_error_handler)  # type: ignore
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore
    app.add_exception_handler(Exception, unhandled_error_handler)

    # --- Register API routers ---
    from ituss.api.auth import router as auth_router
    from ituss.api.devices import router as devices_router

    app.include_router(auth_router)
    app.include_router(devices_router)

    @app.get("/")
    def root():
        """Health check / server info."""
        return {
            "name": settings.server_name,
            "version": VERSION,
            "status": "running",
        }

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
