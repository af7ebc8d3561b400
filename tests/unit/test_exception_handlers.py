"""HTTP mapping of domain, storage and unexpected errors."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.core.exception_handlers import register_exception_handlers
from app.domain.exceptions import (
    AuthenticationException,
    LaporanServiceException,
    LaporanVersionConflictException,
    PersistenceException,
    ResourceNotFoundException,
    ValidationException,
    WorkflowRuleViolationException,
)
from app.infrastructure.exceptions import StorageNotFoundError, StorageUploadError

ERRORS: dict[str, Exception] = {
    "not-found": ResourceNotFoundException("laporan", "lap1"),
    "validation": ValidationException("bad date", field="request_date"),
    "auth": AuthenticationException(),
    "workflow": WorkflowRuleViolationException("already rejected", "lap1", "rejected", "reject"),
    "conflict": LaporanVersionConflictException("lap1", 2),
    "persistence": PersistenceException("laporan.update", "OperationalError"),
    "storage": StorageUploadError("need-approve/1-a.pdf", "timeout"),
    "storage-missing": StorageNotFoundError("need-approve/1-a.pdf"),
    "other-domain": LaporanServiceException("odd", "SOMETHING_ELSE"),
    "crash": RuntimeError("boom"),
}


@pytest.fixture
async def error_client() -> AsyncClient:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/raise/{name}")
    async def _raise(name: str) -> None:
        raise ERRORS[name]

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.parametrize(
    ("name", "status", "error"),
    [
        ("not-found", 404, "RESOURCE_NOT_FOUND"),
        ("validation", 400, "VALIDATION_ERROR"),
        ("auth", 401, "AUTHENTICATION_ERROR"),
        ("workflow", 409, "WORKFLOW_RULE_VIOLATION"),
        ("conflict", 409, "LAPORAN_VERSION_CONFLICT"),
        ("persistence", 500, "PERSISTENCE_ERROR"),
        ("storage", 502, "STORAGE_UPLOAD_ERROR"),
        ("storage-missing", 404, "STORAGE_NOT_FOUND"),
        ("other-domain", 400, "SOMETHING_ELSE"),
    ],
)
async def test_domain_errors_map_to_status(
    error_client: AsyncClient, name: str, status: int, error: str
) -> None:
    response = await error_client.get(f"/raise/{name}")
    assert response.status_code == status
    assert response.json()["error"] == error


async def test_client_errors_keep_details(error_client: AsyncClient) -> None:
    body = (await error_client.get("/raise/workflow")).json()
    assert body["details"] == {"laporan_id": "lap1", "status": "rejected", "action": "reject"}


async def test_server_faults_hide_details(error_client: AsyncClient) -> None:
    body = (await error_client.get("/raise/storage")).json()
    assert body["details"] == {}


async def test_authentication_error_challenges_bearer(error_client: AsyncClient) -> None:
    response = await error_client.get("/raise/auth")
    assert response.headers["www-authenticate"] == "Bearer"


async def test_unexpected_error_is_generic_500(error_client: AsyncClient) -> None:
    response = await error_client.get("/raise/crash")
    assert response.status_code == 500
    assert response.json() == {"error": "INTERNAL_ERROR", "message": "Internal server error"}
