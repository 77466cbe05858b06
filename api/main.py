from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from api.observability import (
    configure_logging,
    monotonic_ms,
    new_request_id,
    request_log_fields,
    reset_race_fields,
    reset_request_id,
    set_request_id,
    start_race_fields,
)
from api.ratelimit import limiter, rate_limit_exceeded_handler
from api.routes import router
from tripace.config import get_settings
from tripace.services.genai import GenerativeServiceError
from tripace.services.race_data import InvalidInputError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": {"code": code, "message": message}})


async def invalid_input_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("invalid_input", extra={"path": request.url.path, "error": str(exc)})
    return _error_response(422, "INVALID_INPUT", str(exc))


async def generation_failed_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("generation_failed", extra={"path": request.url.path, "error": str(exc)})
    return _error_response(502, "GENERATION_FAILED", str(exc))


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Tripace Race Planner API", version="1.0.0")
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.add_exception_handler(GenerativeServiceError, generation_failed_handler)
    app.include_router(router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_and_logging(request: Request, call_next: Callable) -> Response:
        header_name = settings.request_id_header_name or "X-Request-ID"
        request_id = (request.headers.get(header_name) or "").strip() or new_request_id()
        token = set_request_id(request_id)
        race_token = start_race_fields()
        started_ms = monotonic_ms()
        client_ip = getattr(request.client, "host", None)
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = monotonic_ms() - started_ms
            logger.exception(
                "http_request_error",
                extra=request_log_fields(
                    method=request.method,
                    path=request.url.path,
                    status_code=500,
                    duration_ms=duration_ms,
                    client_ip=client_ip,
                ),
            )
            raise
        else:
            response.headers[header_name] = request_id
            duration_ms = monotonic_ms() - started_ms
            logger.info(
                "http_request",
                extra=request_log_fields(
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=duration_ms,
                    client_ip=client_ip,
                ),
            )
            return response
        finally:
            reset_race_fields(race_token)
            reset_request_id(token)

    logger.info(
        "app_created",
        extra={
            "env": settings.app_env,
            "split_strategy": settings.split_strategy,
            "pace_plan_strategy": settings.pace_plan_strategy,
            "genai_configured": settings.genai_configured,
        },
    )
    return app


app = create_app()
