"""Laporan API: thin routes delegating to LaporanWorkflowService and LaporanQueryService.

Writes are multipart: a JSON ``payload`` form field plus optional
``needApproveFiles`` / ``noNeedApproveFiles`` file fields.
"""

from typing import Annotated, TypeVar

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.api.v1.dependencies import (
    Actor,
    get_current_actor,
    get_laporan_query_service,
    get_laporan_workflow_service,
    require_roles,
)
from app.application.dtos import LaporanCreate, LaporanFiles, LaporanUpdate, RawFile
from app.application.services.attachment_mapper import FIELD_NAMES
from app.application.use_cases.laporan import (
    LaporanQueryService,
    LaporanWorkflowService,
)
from app.core.config import get_settings
from app.domain.enums import ApprovalRole, AttachmentCategory
from app.domain.exceptions import ValidationException
from app.schemas.laporan import (
    LaporanCreateRequest,
    LaporanFieldsRequest,
    LaporanResponse,
    LaporanUpdateRequest,
    RejectRequest,
)

router = APIRouter()

NEED_APPROVE_FIELD = FIELD_NAMES[AttachmentCategory.NEED_APPROVE]
NO_NEED_APPROVE_FIELD = FIELD_NAMES[AttachmentCategory.NO_NEED_APPROVE]

VendorActor = Annotated[Actor, Depends(require_roles("edit laporan", ApprovalRole.VENDOR))]
ReviewerActor = Annotated[
    Actor, Depends(require_roles("reject laporan", ApprovalRole.EM, ApprovalRole.USER))
]
AnyActor = Annotated[Actor, Depends(get_current_actor)]
Workflow = Annotated[LaporanWorkflowService, Depends(get_laporan_workflow_service)]
Queries = Annotated[LaporanQueryService, Depends(get_laporan_query_service)]

T = TypeVar("T", bound=BaseModel)


def _parse_payload(model: type[T], payload: str | None) -> T:
    """Validate the JSON payload form field; errors surface like body validation errors."""
    try:
        return model.model_validate_json(payload or "{}")
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


async def _read_uploads(uploads: list[UploadFile] | None, field_name: str) -> list[RawFile]:
    max_size = get_settings().max_upload_size
    raw_files: list[RawFile] = []
    for upload in uploads or []:
        if not upload.filename:
            raise ValidationException("Filename required", field=field_name)
        content = await upload.read()
        if len(content) > max_size:
            raise ValidationException(
                f"{upload.filename} exceeds the {max_size} byte upload limit", field=field_name
            )
        raw_files.append(
            RawFile(
                filename=upload.filename,
                content=content,
                mime_type=upload.content_type or "application/octet-stream",
                field_name=field_name,
                encoding=upload.headers.get("content-transfer-encoding"),
            )
        )
    return raw_files


async def _read_files(
    need_approve: list[UploadFile] | None, no_need_approve: list[UploadFile] | None
) -> LaporanFiles:
    return LaporanFiles(
        need_approve_files=await _read_uploads(need_approve, NEED_APPROVE_FIELD),
        no_need_approve_files=await _read_uploads(no_need_approve, NO_NEED_APPROVE_FIELD),
    )


@router.post("", response_model=LaporanResponse, status_code=201)
async def create_laporan(
    actor: VendorActor,
    workflow: Workflow,
    payload: Annotated[str, Form(description="LaporanCreateRequest as JSON")],
    need_approve_files: Annotated[
        list[UploadFile] | None, File(alias=NEED_APPROVE_FIELD)
    ] = None,
    no_need_approve_files: Annotated[
        list[UploadFile] | None, File(alias=NO_NEED_APPROVE_FIELD)
    ] = None,
    submit: bool = Query(False, description="Create directly in 'submitted'"),
) -> LaporanResponse:
    """Create a laporan in 'entry' (or 'submitted' with ?submit=true)."""
    body = _parse_payload(LaporanCreateRequest, payload)
    files = await _read_files(need_approve_files, no_need_approve_files)
    view = await workflow.create(LaporanCreate(**body.model_dump()), files, submit_now=submit)
    return LaporanResponse.model_validate(view)


@router.get("", response_model=list[LaporanResponse])
async def list_laporan(actor: AnyActor, queries: Queries) -> list[LaporanResponse]:
    """All laporan, newest first."""
    return [LaporanResponse.model_validate(v) for v in await queries.find_all()]


@router.get("/filter", response_model=list[LaporanResponse])
async def filter_laporan(
    actor: AnyActor,
    queries: Queries,
    status: str | None = Query(None, description="entry, submitted, approved, rejected, resubmitted"),
    start_date: str | None = Query(None, description="YYYY-MM-DD, inclusive"),
    end_date: str | None = Query(None, description="YYYY-MM-DD, inclusive"),
) -> list[LaporanResponse]:
    """Filter by status and created date range (all optional, combined with AND)."""
    views = await queries.filter(status=status, start_date=start_date, end_date=end_date)
    return [LaporanResponse.model_validate(v) for v in views]


@router.get("/assigned", response_model=list[LaporanResponse])
async def list_assigned(
    actor: AnyActor,
    queries: Queries,
    user_id: str | None = Query(None, description="Defaults to the caller"),
) -> list[LaporanResponse]:
    """Laporan assigned to a user, newest first."""
    views = await queries.find_assigned_to_user(user_id or actor.user_id)
    return [LaporanResponse.model_validate(v) for v in views]


@router.get("/{laporan_id}", response_model=LaporanResponse)
async def get_laporan(laporan_id: str, actor: AnyActor, queries: Queries) -> LaporanResponse:
    return LaporanResponse.model_validate(await queries.find_one(laporan_id))


@router.patch("/{laporan_id}", response_model=LaporanResponse)
async def update_laporan(
    laporan_id: str,
    actor: VendorActor,
    workflow: Workflow,
    payload: Annotated[str | None, Form(description="LaporanUpdateRequest as JSON")] = None,
    need_approve_files: Annotated[
        list[UploadFile] | None, File(alias=NEED_APPROVE_FIELD)
    ] = None,
    no_need_approve_files: Annotated[
        list[UploadFile] | None, File(alias=NO_NEED_APPROVE_FIELD)
    ] = None,
) -> LaporanResponse:
    """Partial update; uploaded files are appended to their category."""
    body = _parse_payload(LaporanUpdateRequest, payload)
    changes = LaporanUpdate(
        fields=body.model_dump(exclude_unset=True, exclude={"status"}),
        status=body.status,
    )
    files = await _read_files(need_approve_files, no_need_approve_files)
    return LaporanResponse.model_validate(await workflow.update(laporan_id, changes, files))


@router.post("/{laporan_id}/resubmit", response_model=LaporanResponse)
async def resubmit_laporan(
    laporan_id: str,
    actor: VendorActor,
    workflow: Workflow,
    payload: Annotated[str | None, Form(description="LaporanFieldsRequest as JSON")] = None,
    need_approve_files: Annotated[
        list[UploadFile] | None, File(alias=NEED_APPROVE_FIELD)
    ] = None,
    no_need_approve_files: Annotated[
        list[UploadFile] | None, File(alias=NO_NEED_APPROVE_FIELD)
    ] = None,
) -> LaporanResponse:
    """Apply changes, append files and move to 'resubmitted' atomically."""
    body = _parse_payload(LaporanFieldsRequest, payload)
    files = await _read_files(need_approve_files, no_need_approve_files)
    view = await workflow.resubmit(laporan_id, body.model_dump(exclude_unset=True), files)
    return LaporanResponse.model_validate(view)


@router.post("/{laporan_id}/submit", response_model=LaporanResponse)
async def submit_laporan(laporan_id: str, actor: VendorActor, workflow: Workflow) -> LaporanResponse:
    return LaporanResponse.model_validate(await workflow.submit(laporan_id))


@router.post("/{laporan_id}/approve", response_model=LaporanResponse)
async def approve_laporan(laporan_id: str, actor: AnyActor, workflow: Workflow) -> LaporanResponse:
    """Set the caller's approval flag (role from the token)."""
    return LaporanResponse.model_validate(await workflow.approve(laporan_id, actor.role))


@router.post("/{laporan_id}/reject", response_model=LaporanResponse)
async def reject_laporan(
    laporan_id: str, body: RejectRequest, actor: ReviewerActor, workflow: Workflow
) -> LaporanResponse:
    view = await workflow.reject(laporan_id, body.reason, actor.user_id)
    return LaporanResponse.model_validate(view)


@router.delete("/{laporan_id}", status_code=204)
async def delete_laporan(laporan_id: str, actor: VendorActor, workflow: Workflow) -> None:
    """Delete the laporan and its stored attachments."""
    await workflow.remove(laporan_id)
