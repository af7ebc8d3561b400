"""Serves local-storage download links (signed token URLs)."""

import posixpath
import re
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from app.api.v1.dependencies import get_storage
from app.infrastructure.external.storage.protocol import StorageProtocol

router = APIRouter()

_KEY_PREFIX = re.compile(r"^\d+-")


def _download_name(storage_ref: str) -> str:
    """need-approve/1718000000000-invoice.pdf -> invoice.pdf"""
    return _KEY_PREFIX.sub("", posixpath.basename(storage_ref)) or "download"


@router.get("/download/{token}")
async def download(
    token: str,
    storage: Annotated[StorageProtocol, Depends(get_storage)],
) -> StreamingResponse:
    """Stream the file a token was issued for. Only the local backend issues tokens."""
    validate = getattr(storage, "validate_download_token", None)
    if validate is None:
        raise HTTPException(status_code=404, detail="Not found")
    storage_ref = validate(token)
    if storage_ref is None:
        raise HTTPException(status_code=403, detail="Invalid or expired download link")
    metadata = await storage.get_metadata(storage_ref)
    filename = _download_name(storage_ref)
    return StreamingResponse(
        storage.download(storage_ref),
        media_type=metadata["content_type"],
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}",
            "Content-Length": str(metadata["size"]),
        },
    )
