"""
HTTP application factory.

Usage:
    from llm_leaderboard.api.app import create_app

    app = create_app()                      # settings from the environment
    app = create_app(db=DatabaseConnection("sqlite:///:memory:"))

Run the server with the ``llm-leaderboard`` console script.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import ApiConfig, config
from ..db.connection import DatabaseConnection
from ..exceptions import InvalidTransitionError, ValidationError
from ..services.inference_runner import InferenceRunner
from ..utils.logging_config import get_logger, setup_logging
from .dependencies import require_token
from .routers import datasets, health, inferences, metrics, models, providers

logger = get_logger(__name__)


def _format_request_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(messages)


def create_app(
    db: Optional[DatabaseConnection] = None,
    runner: Optional[InferenceRunner] = None,
    api_config: Optional[ApiConfig] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        db: Database connection (default: from DATABASE_URL)
        runner: Inference runner (default: provider-backed runner over ``db``)
        api_config: Token and CORS settings (default: from the environment)
    """
    db = db or DatabaseConnection(config.database.connection_string)
    runner = runner or InferenceRunner(db)
    api_config = api_config or config.api

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting LLM Leaderboard API, initializing database")
        try:
            db.init_db()
        except Exception as e:
            logger.error("Failed to initialize database: %s", e, exc_info=True)
            raise
        yield
        logger.info("Shutting down LLM Leaderboard API")

    app = FastAPI(
        title="LLM Leaderboard API",
        version=__version__,
        description="Evaluate LLM providers and models against datasets.",
        lifespan=lifespan,
    )
    app.state.db = db
    app.state.runner = runner
    app.state.api_token = api_config.api_token

    if api_config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=api_config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={"detail": _format_request_errors(exc)},
        )

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    protected = [Depends(require_token)]
    app.include_router(health.router)
    app.include_router(datasets.router, dependencies=protected)
    app.include_router(providers.router, dependencies=protected)
    app.include_router(models.router, dependencies=protected)
    app.include_router(inferences.router, dependencies=protected)
    app.include_router(metrics.router, dependencies=protected)
    return app


def main() -> None:
    """Console entry point: configure logging and serve the API with uvicorn."""
    import uvicorn

    setup_logging(config.log_level)
    logger.info("Serving on %s:%s", config.api.host, config.api.port)
    uvicorn.run(create_app(), host=config.api.host, port=config.api.port)


if __name__ == "__main__":
    main()
