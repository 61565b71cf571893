"""Tests for the S3 bundle store."""

from __future__ import annotations

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from exposure_export.core.settings import Settings
from exposure_export.services.errors import ConfigurationError, StorageError
from exposure_export.services.storage import S3ObjectStore


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_put_uploads_private_zip(mocker) -> None:
    client = mocker.MagicMock()
    store = S3ObjectStore("exports", client=client)

    store.put("exposures/ie/1.zip", b"zip", "application/zip", "private")

    client.put_object.assert_called_once_with(
        ACL="private",
        Body=b"zip",
        Bucket="exports",
        ContentType="application/zip",
        Key="exposures/ie/1.zip",
    )


def test_put_failure_raises_storage_error(mocker) -> None:
    client = mocker.MagicMock()
    client.put_object.side_effect = _client_error("AccessDenied", "PutObject")
    store = S3ObjectStore("exports", client=client)

    with pytest.raises(StorageError) as excinfo:
        store.put("exposures/ie/1.zip", b"zip", "application/zip")

    assert excinfo.value.key == "exposures/ie/1.zip"


def test_delete_tolerates_missing_objects(mocker) -> None:
    client = mocker.MagicMock()
    client.delete_object.side_effect = _client_error("NoSuchKey", "DeleteObject")
    store = S3ObjectStore("exports", client=client)

    store.delete("exposures/ie/1.zip")

    client.delete_object.assert_called_once_with(Bucket="exports", Key="exposures/ie/1.zip")


def test_delete_failure_raises_storage_error(mocker) -> None:
    client = mocker.MagicMock()
    client.delete_object.side_effect = EndpointConnectionError(endpoint_url="http://s3")
    store = S3ObjectStore("exports", client=client)

    with pytest.raises(StorageError):
        store.delete("exposures/ie/1.zip")


def test_from_settings_requires_bucket() -> None:
    with pytest.raises(ConfigurationError):
        S3ObjectStore.from_settings(Settings(EXPORTS_BUCKET=None))


def test_from_settings_passes_region_and_endpoint(mocker) -> None:
    boto_client = mocker.patch("exposure_export.services.storage.boto3.client")

    store = S3ObjectStore.from_settings(
        Settings(
            EXPORTS_BUCKET="exports",
            AWS_REGION="eu-west-1",
            S3_ENDPOINT_URL="http://localhost:9000",
        )
    )

    assert store.bucket == "exports"
    kwargs = boto_client.call_args.kwargs
    assert kwargs["service_name"] == "s3"
    assert kwargs["region_name"] == "eu-west-1"
    assert kwargs["endpoint_url"] == "http://localhost:9000"
