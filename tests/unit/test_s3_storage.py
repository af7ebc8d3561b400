"""S3StorageService with a mocked boto3 client (no network)."""

import hashlib
from datetime import UTC, datetime, timedelta
from io import BytesIO
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from app.infrastructure.exceptions import (
    StorageChecksumMismatchError,
    StorageNotFoundError,
    StorageUploadError,
)
from app.infrastructure.external.storage.s3_storage import S3StorageService

KEY = "no-need-approve/1718000000000-photo.jpg"
BODY = b"\xff\xd8\xff jpeg"


def _client_error(code: str, operation: str = "HeadObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def s3_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def s3(s3_client: MagicMock) -> S3StorageService:
    with patch(
        "app.infrastructure.external.storage.s3_storage.boto3.client", return_value=s3_client
    ) as factory:
        service = S3StorageService(
            bucket="laporan-files",
            region="ap-southeast-1",
            endpoint_url="https://s3.ap-southeast-1.wasabisys.com",
            access_key="AK",
            secret_key="SK",
        )
    _, kwargs = factory.call_args
    assert kwargs["endpoint_url"] == "https://s3.ap-southeast-1.wasabisys.com"
    assert kwargs["region_name"] == "ap-southeast-1"
    return service


async def test_upload_puts_object_with_checksum_metadata(
    s3: S3StorageService, s3_client: MagicMock
) -> None:
    checksum = hashlib.sha256(BODY).hexdigest()
    result = await s3.upload(BytesIO(BODY), KEY, checksum, "image/jpeg", {"category": "no-need-approve"})

    assert result["storage_ref"] == KEY
    assert result["size"] == len(BODY)
    params = s3_client.put_object.call_args.kwargs
    assert params["Bucket"] == "laporan-files"
    assert params["Key"] == KEY
    assert params["ContentType"] == "image/jpeg"
    assert params["Metadata"] == {"sha256": checksum, "category": "no-need-approve"}
    assert "ServerSideEncryption" not in params
    s3_client.head_object.assert_not_called()


async def test_upload_sends_server_side_encryption_when_configured(s3_client: MagicMock) -> None:
    with patch("app.infrastructure.external.storage.s3_storage.boto3.client", return_value=s3_client):
        service = S3StorageService(bucket="b", server_side_encryption="AES256")
    await service.upload(BytesIO(BODY), KEY, hashlib.sha256(BODY).hexdigest(), "image/jpeg")
    assert s3_client.put_object.call_args.kwargs["ServerSideEncryption"] == "AES256"


async def test_upload_checksum_mismatch_never_reaches_bucket(
    s3: S3StorageService, s3_client: MagicMock
) -> None:
    with pytest.raises(StorageChecksumMismatchError):
        await s3.upload(BytesIO(BODY), KEY, "0" * 64, "image/jpeg")
    s3_client.put_object.assert_not_called()


async def test_upload_client_error_becomes_storage_error(
    s3: S3StorageService, s3_client: MagicMock
) -> None:
    s3_client.put_object.side_effect = _client_error("AccessDenied", "PutObject")
    with pytest.raises(StorageUploadError) as exc_info:
        await s3.upload(BytesIO(BODY), KEY, hashlib.sha256(BODY).hexdigest(), "image/jpeg")
    assert exc_info.value.error_code == "STORAGE_UPLOAD_ERROR"


async def test_delete_missing_object_returns_false(
    s3: S3StorageService, s3_client: MagicMock
) -> None:
    s3_client.head_object.side_effect = _client_error("404")
    assert await s3.delete(KEY) is False
    s3_client.delete_object.assert_not_called()


async def test_delete_existing_object(s3: S3StorageService, s3_client: MagicMock) -> None:
    assert await s3.delete(KEY) is True
    s3_client.delete_object.assert_called_once_with(Bucket="laporan-files", Key=KEY)


async def test_exists(s3: S3StorageService, s3_client: MagicMock) -> None:
    assert await s3.exists(KEY) is True
    s3_client.head_object.side_effect = _client_error("NoSuchKey")
    assert await s3.exists(KEY) is False


async def test_get_metadata_missing(s3: S3StorageService, s3_client: MagicMock) -> None:
    s3_client.head_object.side_effect = _client_error("NotFound")
    with pytest.raises(StorageNotFoundError):
        await s3.get_metadata(KEY)


async def test_get_metadata(s3: S3StorageService, s3_client: MagicMock) -> None:
    s3_client.head_object.return_value = {
        "ContentLength": len(BODY),
        "ContentType": "image/jpeg",
        "LastModified": datetime(2024, 6, 10, tzinfo=UTC),
        "Metadata": {"sha256": "abc", "category": "no-need-approve"},
    }
    meta = await s3.get_metadata(KEY)
    assert meta["size"] == len(BODY)
    assert meta["checksum"] == "abc"
    assert meta["last_modified"] == "2024-06-10T00:00:00+00:00"


async def test_presigned_url_is_signed_locally(s3: S3StorageService, s3_client: MagicMock) -> None:
    s3_client.generate_presigned_url.return_value = "https://signed.example/url"
    url = await s3.generate_download_url(KEY, expiration=timedelta(minutes=30))
    assert url == "https://signed.example/url"
    s3_client.generate_presigned_url.assert_called_once_with(
        "get_object", Params={"Bucket": "laporan-files", "Key": KEY}, ExpiresIn=1800
    )
    s3_client.head_object.assert_not_called()


async def test_download_streams_body(s3: S3StorageService, s3_client: MagicMock) -> None:
    body = MagicMock()
    body.read.return_value = BODY
    s3_client.get_object.return_value = {"Body": body}
    chunks = [chunk async for chunk in s3.download(KEY)]
    assert b"".join(chunks) == BODY


async def test_download_missing(s3: S3StorageService, s3_client: MagicMock) -> None:
    s3_client.get_object.side_effect = _client_error("NoSuchKey", "GetObject")
    with pytest.raises(StorageNotFoundError):
        [chunk async for chunk in s3.download(KEY)]
