"""Builds the attachment store selected by STORAGE_BACKEND."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.infrastructure.external.storage.protocol import StorageProtocol

if TYPE_CHECKING:
    from app.core.config import Settings


def _local(s: Settings) -> StorageProtocol:
    from app.infrastructure.external.storage.local_storage import LocalStorageService

    if not s.storage_root:
        raise ValueError("STORAGE_ROOT required for local backend")
    # Download tokens are signed with the JWT secret so every worker can verify them.
    return LocalStorageService(
        storage_root=s.storage_root,
        signing_key=s.secret_key.get_secret_value(),
        base_url=s.storage_base_url,
    )


def _s3(s: Settings) -> StorageProtocol:
    if not s.s3_bucket:
        raise ValueError("S3_BUCKET required for s3 backend")
    try:
        from app.infrastructure.external.storage.s3_storage import S3StorageService
    except ImportError as e:
        raise ValueError(
            "S3 backend requires boto3. Install with: pip install .[storage]"
        ) from e
    return S3StorageService(
        bucket=s.s3_bucket,
        region=s.s3_region,
        endpoint_url=s.s3_endpoint_url,
        access_key=s.s3_access_key,
        secret_key=s.s3_secret_key.get_secret_value() if s.s3_secret_key else None,
        server_side_encryption=s.s3_server_side_encryption,
    )


_BACKENDS = {"local": _local, "s3": _s3}


class StorageFactory:
    """One storage client per process; created in the lifespan and injected."""

    @staticmethod
    def create_storage_service(settings: Settings | None = None) -> StorageProtocol:
        """Return LocalStorageService or S3StorageService.

        Raises:
            ValueError: Unknown backend or missing backend config.
        """
        from app.core.config import get_settings

        s = settings or get_settings()
        backend = s.storage_backend.lower()
        build = _BACKENDS.get(backend)
        if build is None:
            raise ValueError(
                f"Unknown storage backend: {backend}. Supported: {', '.join(sorted(_BACKENDS))}"
            )
        return build(s)
