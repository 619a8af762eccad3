"""
FastAPI application for ical-filter.

Usage:
    python ical_filter.py --host 0.0.0.0 --port 8080
"""

import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Config
from ..errors import ICalFilterError
from ..logging_setup import get_logger
from ..pipeline import FeedPipeline
from .routes import router


logger = get_logger(__name__)


async def _handle_ical_filter_error(request: Request, exc: ICalFilterError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log("request_failed", path=request.url.path, error=type(exc).__name__, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"error": "BadRequest", "message": problems},
    )


def create_app(config: Config, pipeline: Optional[FeedPipeline] = None) -> FastAPI:
    """
    Build the ASGI application.

    Args:
        config: Process configuration
        pipeline: Request pipeline; built from config when omitted

    Returns:
        The configured FastAPI app.
    """
    app = FastAPI(
        title="ical-filter",
        description="Normalize and filter iCalendar feeds",
        version=__version__,
    )
    app.state.config = config
    app.state.pipeline = pipeline if pipeline is not None else FeedPipeline(config)

    app.add_exception_handler(ICalFilterError, _handle_ical_filter_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("unhandled_error", path=request.url.path)
            response = JSONResponse(
                status_code=500,
                content={"error": "InternalServerError", "message": "internal server error"},
            )
        logger.info(
            "request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response

    app.include_router(router)
    return app
