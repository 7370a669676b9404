"""FastAPI entrypoint for the task suggestion service."""
from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST

from .config import Settings, get_settings
from .errors import RequestValidationFailed
from .matcher import TaskMatcher, random_failure_injector
from .models import ErrorResponse, TaskSuggestionRequest, TaskSuggestionResponse
from .observability.logging import configure_logging, emit_trace
from .observability.metrics import SuggestionMetrics
from .retry import RetryExecutor, RetryPolicy
from .rules import default_rule_table
from .validation import TaskSuggestionRequestValidator

_logger = structlog.get_logger(__name__)

INTERNAL_ERROR = ErrorResponse(
    message="An error occurred while processing your request",
    errors=["Internal server error"],
)

router = APIRouter()


def get_task_matcher(request: Request) -> TaskMatcher:
    return request.app.state.matcher


def get_validator(request: Request) -> TaskSuggestionRequestValidator:
    return request.app.state.validator


def get_metrics(request: Request) -> SuggestionMetrics:
    return request.app.state.metrics


def _error(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("/suggestTask", response_model=TaskSuggestionResponse)
@router.post("/api/TaskSuggestion/suggestTask", response_model=TaskSuggestionResponse, include_in_schema=False)
async def suggest_task(
    request: Request,
    payload: Optional[TaskSuggestionRequest] = Body(default=None),
    matcher: TaskMatcher = Depends(get_task_matcher),
    validator: TaskSuggestionRequestValidator = Depends(get_validator),
    metrics: SuggestionMetrics = Depends(get_metrics),
) -> TaskSuggestionResponse | JSONResponse:
    if payload is None:
        _logger.warning("suggestion.null_request")
        return _error(400, ErrorResponse(message="Request body is required", errors=["Request body cannot be null"]))

    _logger.info("suggestion.request", user_id=payload.user_id, session_id=payload.session_id)
    errors = validator.validate(payload)
    if errors:
        raise RequestValidationFailed(errors)

    try:
        task = await matcher.suggest_task(payload.utterance)
    except Exception:
        _logger.exception("suggestion.failed", user_id=payload.user_id)
        return _error(500, INTERNAL_ERROR)

    metrics.record_suggestion(task)
    emit_trace(
        request.app.state.trace_logger,
        event="suggestion.completed",
        userId=payload.user_id,
        sessionId=payload.session_id,
        task=task,
    )
    _logger.info("suggestion.completed", user_id=payload.user_id, task=task)
    return TaskSuggestionResponse(task=task)


@router.get("/metrics")
async def metrics_endpoint(metrics: SuggestionMetrics = Depends(get_metrics)) -> PlainTextResponse:
    return PlainTextResponse(metrics.export(), media_type=CONTENT_TYPE_LATEST)


async def handle_validation_failed(_: Request, exc: RequestValidationFailed) -> JSONResponse:
    _logger.warning("suggestion.validation_failed", errors=exc.errors)
    return _error(400, ErrorResponse(message="Validation failed", errors=exc.errors))


async def handle_malformed_request(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        errors.append(f"{location}: {message}" if location else message)
    _logger.warning("suggestion.malformed_request", errors=errors)
    return _error(400, ErrorResponse(message="Validation failed", errors=errors))


async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
    _logger.error("request.unhandled_error", error=str(exc))
    return _error(500, INTERNAL_ERROR)


def build_matcher(settings: Settings, metrics: SuggestionMetrics) -> TaskMatcher:
    policy = RetryPolicy(max_attempts=settings.max_attempts, base_delay_seconds=settings.backoff_base_ms / 1000)
    executor = RetryExecutor(
        policy,
        on_failure=lambda attempt, _exc: metrics.record_failed_attempt(attempt, policy.max_attempts),
    )
    return TaskMatcher(
        rules=default_rule_table(),
        executor=executor,
        failure_injector=random_failure_injector(settings.failure_rate),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    trace_logger = configure_logging(settings.log_level, settings.trace_log_path)

    app = FastAPI(title="Task Suggestion API", version="0.1.0")
    metrics = SuggestionMetrics()
    app.state.settings = settings
    app.state.metrics = metrics
    app.state.matcher = build_matcher(settings, metrics)
    app.state.validator = TaskSuggestionRequestValidator()
    app.state.trace_logger = trace_logger

    app.include_router(router)
    app.add_exception_handler(RequestValidationFailed, handle_validation_failed)
    app.add_exception_handler(RequestValidationError, handle_malformed_request)
    app.add_exception_handler(Exception, handle_unexpected)

    _logger.info("service.configured", settings=settings.model_dump(mode="json"))
    return app


app = create_app()
