"""Photo storage tests — upload rules and local-disk backend."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from civic_reporter.config import Settings
from civic_reporter.services.storage_service import StorageService, storage_service
from civic_reporter.utils.exceptions import DependencyError, ValidationError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class TestValidateImage:

    @pytest.mark.parametrize("filename", ["a.jpg", "a.JPEG", "a.png", "a.gif", "a.webp"])
    def test_allowed_extensions(self, filename):
        assert storage_service.validate_image(filename, "image/jpeg", 10) == filename.rsplit(".", 1)[1].lower()

    def test_non_image_content_type(self):
        with pytest.raises(ValidationError):
            storage_service.validate_image("a.jpg", "application/pdf", 10)

    def test_disallowed_extension(self):
        with pytest.raises(ValidationError):
            storage_service.validate_image("a.bmp", "image/bmp", 10)

    def test_empty_file(self):
        with pytest.raises(ValidationError):
            storage_service.validate_image("a.png", "image/png", 0)

    def test_exactly_max_size_is_allowed(self):
        limit = storage_service.config.MAX_IMAGE_BYTES
        assert storage_service.validate_image("a.png", "image/png", limit) == "png"
        with pytest.raises(ValidationError):
            storage_service.validate_image("a.png", "image/png", limit + 1)


class TestLocalBackend:

    def test_store_and_delete(self, uploads_dir):
        stored = storage_service.store(PNG_BYTES, "crack.png", "image/png")
        path = uploads_dir / stored.storage_id
        assert path.read_bytes() == PNG_BYTES
        assert stored.url.endswith(f"/uploads/{stored.storage_id}")

        storage_service.delete(stored.storage_id)
        assert not path.exists()

    def test_delete_missing_is_ok(self):
        storage_service.delete("civic-issues/2024/01/01/does-not-exist.png")

    def test_write_failure_is_dependency_error(self):
        with patch("pathlib.Path.write_bytes", side_effect=OSError("read-only filesystem")):
            with pytest.raises(DependencyError):
                storage_service.store(PNG_BYTES, "crack.png", "image/png")


class TestS3Backend:

    @pytest.fixture
    def s3_service(self, monkeypatch) -> StorageService:
        config = Settings(
            AWS_ACCESS_KEY_ID="AKIATEST",
            AWS_SECRET_ACCESS_KEY="secret",
            AWS_S3_BUCKET="civic-photos",
            AWS_S3_REGION="ap-south-1",
        )
        service = StorageService(config)
        monkeypatch.setattr(StorageService, "is_local", property(lambda self: False))
        service._client = MagicMock()
        return service

    def test_put_object(self, s3_service):
        stored = s3_service.store(PNG_BYTES, "crack.png", "image/png")
        s3_service._client.put_object.assert_called_once()
        kwargs = s3_service._client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "civic-photos"
        assert kwargs["Key"] == stored.storage_id
        assert kwargs["ContentType"] == "image/png"
        assert stored.url == f"https://civic-photos.s3.ap-south-1.amazonaws.com/{stored.storage_id}"

    def test_client_error_is_dependency_error(self, s3_service):
        s3_service._client.delete_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DeleteObject"
        )
        with pytest.raises(DependencyError):
            s3_service.delete("civic-issues/2024/01/01/x.png")
