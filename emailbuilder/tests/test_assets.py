"""Tests for blob stores and the image asset service."""

import boto3
import pytest
from botocore.stub import Stubber

from emailbuilder.assets import (
    ImageAssetService,
    LocalBlobStore,
    S3BlobStore,
)
from emailbuilder.assets.blob_store import check_key
from emailbuilder.errors import Forbidden, InvalidInput, Unavailable

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class TestCheckKey:
    """Test key sanitation."""

    @pytest.mark.parametrize("key", ["", "/abs/path.png", "ns/../other/x.png", "ns\\x.png"])
    def test_rejected(self, key):
        with pytest.raises(InvalidInput):
            check_key(key)

    def test_accepted(self):
        assert check_key("emailbuilder/u1/a.png") == "emailbuilder/u1/a.png"


class TestLocalBlobStore:
    """Test the filesystem backend."""

    def test_put_and_delete(self, tmp_path):
        store = LocalBlobStore(tmp_path, base_url="/uploads/")
        stored = store.put("ns/u1/a.png", PNG_BYTES, "image/png")

        assert stored.url == "/uploads/ns/u1/a.png"
        assert stored.size == len(PNG_BYTES)
        assert (tmp_path / "ns" / "u1" / "a.png").read_bytes() == PNG_BYTES

        assert store.delete("ns/u1/a.png") is True
        assert store.delete("ns/u1/a.png") is False

    def test_write_failure_is_unavailable(self, tmp_path):
        store = LocalBlobStore(tmp_path)
        (tmp_path / "ns").write_bytes(b"a file where a directory should be")

        with pytest.raises(Unavailable):
            store.put("ns/u1/a.png", PNG_BYTES, "image/png")


class TestS3BlobStore:
    """Test the S3 backend against a stubbed client."""

    @pytest.fixture
    def s3_client(self):
        return boto3.client(
            "s3",
            region_name="us-east-1",
            aws_access_key_id="test",
            aws_secret_access_key="test",
        )

    @pytest.fixture
    def store(self, s3_client):
        return S3BlobStore(
            bucket="assets",
            public_base_url="https://cdn.example.com/",
            client=s3_client,
        )

    def test_put(self, store, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_response(
                "put_object",
                {},
                {"Bucket": "assets", "Key": "ns/u1/a.png", "Body": PNG_BYTES, "ContentType": "image/png"},
            )
            stored = store.put("ns/u1/a.png", PNG_BYTES, "image/png")
            stubber.assert_no_pending_responses()

        assert stored.url == "https://cdn.example.com/ns/u1/a.png"

    def test_put_failure_is_unavailable(self, store, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_client_error("put_object", service_error_code="InternalError", http_status_code=500)
            with pytest.raises(Unavailable):
                store.put("ns/u1/a.png", PNG_BYTES, "image/png")

    def test_delete_existing(self, store, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_response("head_object", {}, {"Bucket": "assets", "Key": "ns/u1/a.png"})
            stubber.add_response("delete_object", {}, {"Bucket": "assets", "Key": "ns/u1/a.png"})
            assert store.delete("ns/u1/a.png") is True
            stubber.assert_no_pending_responses()

    def test_delete_missing(self, store, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)
            assert store.delete("ns/u1/a.png") is False

    def test_delete_failure_is_unavailable(self, store, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_client_error("head_object", service_error_code="AccessDenied", http_status_code=403)
            with pytest.raises(Unavailable):
                store.delete("ns/u1/a.png")

    def test_url_without_public_base(self, s3_client):
        store = S3BlobStore(bucket="assets", endpoint_url="https://r2.example.com/", client=s3_client)
        assert store.url_for("k.png") == "https://r2.example.com/assets/k.png"


class TestImageAssetService:
    """Test upload validation and namespaced deletion."""

    @pytest.fixture
    def service(self, blob_store):
        return ImageAssetService(blob_store, namespace="emailbuilder", max_bytes=1024)

    def test_upload(self, service, blob_store):
        ref = service.upload("u1", "image/png", PNG_BYTES)

        assert ref.public_id.startswith("emailbuilder/u1/")
        assert ref.public_id.endswith(".png")
        assert ref.format == "png"
        assert ref.size == len(PNG_BYTES)
        assert ref.url == f"/uploads/{ref.public_id}"
        assert (blob_store.root / ref.public_id).exists()

    def test_upload_jpeg_with_parameters(self, service):
        ref = service.upload("u1", "image/JPEG; charset=binary", b"\xff\xd8\xff")
        assert ref.format == "jpg"

    def test_upload_empty(self, service):
        with pytest.raises(InvalidInput) as exc_info:
            service.upload("u1", "image/png", b"")
        assert exc_info.value.message == "No files were uploaded."

    def test_upload_too_large(self, service):
        with pytest.raises(InvalidInput) as exc_info:
            service.upload("u1", "image/png", b"x" * 1025)
        assert exc_info.value.message == "File size too large"

    def test_upload_wrong_type(self, service):
        with pytest.raises(InvalidInput) as exc_info:
            service.upload("u1", "application/pdf", b"%PDF")
        assert exc_info.value.message == "Invalid file type"

    def test_delete_own_image(self, service):
        ref = service.upload("u1", "image/png", PNG_BYTES)
        assert service.delete("u1", ref.public_id) == {"result": "ok"}

    def test_double_delete_is_not_an_error(self, service):
        ref = service.upload("u1", "image/png", PNG_BYTES)
        service.delete("u1", ref.public_id)
        assert service.delete("u1", ref.public_id) == {"result": "not found"}

    def test_delete_other_users_image_forbidden(self, service, blob_store):
        ref = service.upload("u1", "image/png", PNG_BYTES)

        with pytest.raises(Forbidden):
            service.delete("u2", ref.public_id)
        assert (blob_store.root / ref.public_id).exists()

    def test_prefix_match_is_on_whole_segment(self, service):
        with pytest.raises(Forbidden):
            service.delete("u1", "emailbuilder/u12/a.png")

    def test_delete_requires_id(self, service):
        with pytest.raises(InvalidInput):
            service.delete("u1", "")

    def test_delete_rejects_traversal(self, service):
        with pytest.raises(InvalidInput):
            service.delete("u1", "emailbuilder/u1/../u2/a.png")
