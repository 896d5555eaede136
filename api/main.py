"""FastAPI entrypoint for the finance HTTP endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from fastapi import Body, Depends, FastAPI, Header
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware

from backend.auth.context import RequestContext
from backend.errors import AccessError
from backend.factory import build_backend_services
from backend.operations import FinanceOperations
from backend.seed import seed_demo_data
from shared import config as _config
from shared.models import (
    AuthResult,
    Category,
    DashboardSummary,
    ErrorCode,
    ErrorPayload,
    Transaction,
    TransactionsPage,
    UserProfile,
)


logger = logging.getLogger(__name__)


_STATUS_BY_CODE = {
    ErrorCode.AUTHENTICATION_FAILED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.DUPLICATE_NAME: 409,
    ErrorCode.DUPLICATE_EMAIL: 409,
    ErrorCode.VALIDATION_FAILED: 422,
    ErrorCode.INTERNAL_ERROR: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the store handle once per process and drop it at shutdown."""

    app.state.services = build_backend_services()
    if _config.seed_demo_data():
        seed_demo_data(app.state.services)
    logger.info("backend_services_ready")
    try:
        yield
    finally:
        app.state.services = None
        logger.info("backend_services_released")


app = FastAPI(title="Financy API", lifespan=lifespan)

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


def _error_response(payload: ErrorPayload) -> JSONResponse:
    return JSONResponse(
        status_code=_STATUS_BY_CODE[payload.code],
        content=payload.model_dump(mode="json"),
    )


@app.exception_handler(AccessError)
async def handle_access_error(request: Request, exc: AccessError) -> JSONResponse:
    """Map domain errors to their HTTP status with a stable error body."""

    logger.info(
        "access_error method=%s path=%s code=%s",
        request.method,
        request.url.path,
        exc.code.value,
    )
    return _error_response(exc.to_payload())


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_failed method=%s path=%s", request.method, request.url.path)
    return _error_response(
        ErrorPayload(
            code=ErrorCode.VALIDATION_FAILED,
            message="Invalid request",
            details={"validation_errors": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
                for error in exc.errors()
            ]},
        )
    )


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return _error_response(ErrorPayload(code=ErrorCode.INTERNAL_ERROR, message="Internal Server Error"))


def get_operations(request: Request) -> FinanceOperations:
    return request.app.state.services.operations


def get_request_context(
    authorization: str | None = Header(default=None),
    operations: FinanceOperations = Depends(get_operations),
) -> RequestContext:
    return operations.resolve_context(authorization)


def _present(**params: str | None) -> dict[str, str]:
    """Drop absent and empty query parameters."""

    return {key: value for key, value in params.items() if value is not None and value.strip()}


@app.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@app.post("/auth/register", status_code=201)
def register(
    payload: dict[str, Any] = Body(...),
    operations: FinanceOperations = Depends(get_operations),
) -> AuthResult:
    return operations.register(payload)


@app.post("/auth/login")
def login(
    payload: dict[str, Any] = Body(...),
    operations: FinanceOperations = Depends(get_operations),
) -> AuthResult:
    return operations.login(payload)


@app.get("/profile")
def get_profile(
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> UserProfile:
    return operations.get_profile(context)


@app.patch("/profile")
def update_profile(
    payload: dict[str, Any] = Body(...),
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> UserProfile:
    return operations.update_profile(context, payload)


@app.get("/categories")
def list_categories(
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> list[Category]:
    return operations.list_categories(context)


@app.post("/categories", status_code=201)
def create_category(
    payload: dict[str, Any] = Body(...),
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> Category:
    return operations.create_category(context, payload)


@app.get("/categories/{category_id}")
def get_category(
    category_id: UUID,
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> Category:
    return operations.get_category(context, category_id)


@app.patch("/categories/{category_id}")
def update_category(
    category_id: UUID,
    payload: dict[str, Any] = Body(...),
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> Category:
    return operations.update_category(context, category_id, payload)


@app.delete("/categories/{category_id}")
def delete_category(
    category_id: UUID,
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> dict[str, bool]:
    return {"deleted": operations.delete_category(context, category_id)}


@app.get("/transactions")
def list_transactions(
    search: str | None = None,
    type: str | None = None,
    category_id: str | None = None,
    month: str | None = None,
    year: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> TransactionsPage:
    filters = _present(
        search=search,
        type=type,
        category_id=category_id,
        month=month,
        year=year,
        page=page,
        limit=limit,
    )
    return operations.list_transactions(context, filters)


@app.post("/transactions", status_code=201)
def create_transaction(
    payload: dict[str, Any] = Body(...),
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> Transaction:
    return operations.create_transaction(context, payload)


@app.get("/transactions/{transaction_id}")
def get_transaction(
    transaction_id: UUID,
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> Transaction:
    return operations.get_transaction(context, transaction_id)


@app.patch("/transactions/{transaction_id}")
def update_transaction(
    transaction_id: UUID,
    payload: dict[str, Any] = Body(...),
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> Transaction:
    return operations.update_transaction(context, transaction_id, payload)


@app.delete("/transactions/{transaction_id}")
def delete_transaction(
    transaction_id: UUID,
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> dict[str, bool]:
    return {"deleted": operations.delete_transaction(context, transaction_id)}


@app.get("/dashboard")
def get_dashboard(
    month: str | None = None,
    year: str | None = None,
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> DashboardSummary:
    return operations.dashboard_summary(context, _present(month=month, year=year))


@app.get("/dashboard/report.pdf")
def get_dashboard_report_pdf(
    month: str | None = None,
    year: str | None = None,
    context: RequestContext = Depends(get_request_context),
    operations: FinanceOperations = Depends(get_operations),
) -> Response:
    pdf_bytes, period_label = operations.dashboard_report(context, _present(month=month, year=year))
    logger.info("dashboard_report_rendered period=%s size=%s", period_label, len(pdf_bytes))
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="dashboard-report-{period_label}.pdf"'},
    )
