"""Storage Service — photo storage on S3 or the local filesystem.

Local mode is selected automatically when the AWS key or bucket is empty.
The lifecycle engine only consumes ``store(bytes) -> StoredImage`` and
``delete(storage_id)``; both raise DependencyError on failure.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from civic_reporter.config import Settings, settings
from civic_reporter.utils.exceptions import DependencyError, ValidationError

logger = logging.getLogger(__name__)

_SERVER_ROOT: Path = Path(__file__).resolve().parent.parent.parent

# Key prefix for every stored photo
FOLDER: str = "civic-issues"


@dataclass(frozen=True)
class StoredImage:
    url: str
    storage_id: str


class StorageService:
    """Photo storage — S3 or local mode chosen from the injected settings."""

    def __init__(self, config: Settings) -> None:
        self.config: Settings = config
        self.uploads_dir: Path = (
            Path(config.LOCAL_UPLOADS_DIR) if config.LOCAL_UPLOADS_DIR else _SERVER_ROOT / "uploads"
        )
        self._client = None

    @property
    def is_local(self) -> bool:
        return not self.config.AWS_ACCESS_KEY_ID or not self.config.AWS_S3_BUCKET

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=self.config.AWS_S3_REGION,
                aws_access_key_id=self.config.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=self.config.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def _extension(self, filename: str | None) -> str:
        return filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else ""

    def _generate_key(self, ext: str) -> str:
        date_prefix = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"{FOLDER}/{date_prefix}/{uuid.uuid4().hex}.{ext}"

    def public_url(self, key: str) -> str:
        if self.is_local:
            return f"{self.config.PUBLIC_BASE_URL.rstrip('/')}/uploads/{key}"
        return f"https://{self.config.AWS_S3_BUCKET}.s3.{self.config.AWS_S3_REGION}.amazonaws.com/{key}"

    def validate_image(self, filename: str | None, content_type: str | None, size: int) -> str:
        """Check an upload against the photo rules and return its extension.

        Raises:
            ValidationError: Not an image, disallowed extension, empty or too large
        """
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed!")
        ext = self._extension(filename)
        if ext not in self.config.ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError(
                f"Image format must be one of: {', '.join(self.config.ALLOWED_IMAGE_EXTENSIONS)}"
            )
        if size == 0:
            raise ValidationError("Image file is empty")
        self.check_size(size)
        return ext

    def check_size(self, size: int) -> None:
        """Reject a photo larger than MAX_IMAGE_BYTES."""
        if size > self.config.MAX_IMAGE_BYTES:
            raise ValidationError(
                f"Image exceeds the maximum size of {self.config.MAX_IMAGE_BYTES // (1024 * 1024)}MB"
            )

    def store(self, data: bytes, filename: str | None, content_type: str | None) -> StoredImage:
        """Validate and store a photo. Returns its public URL and storage id.

        Raises:
            ValidationError: The upload breaks the photo rules (nothing is stored)
            DependencyError: The storage backend failed
        """
        ext = self.validate_image(filename, content_type, len(data))
        key = self._generate_key(ext)

        try:
            if self.is_local:
                path = self.uploads_dir / key
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(data)
            else:
                self.client.put_object(
                    Bucket=self.config.AWS_S3_BUCKET,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                )
        except (OSError, BotoCoreError, ClientError) as exc:
            logger.error("Photo upload failed for %s: %s", key, exc)
            raise DependencyError("Error uploading image")

        return StoredImage(url=self.public_url(key), storage_id=key)

    def delete(self, storage_id: str) -> None:
        """Delete a stored photo. Deleting an already missing object succeeds.

        Raises:
            DependencyError: The storage backend failed
        """
        try:
            if self.is_local:
                (self.uploads_dir / storage_id).unlink(missing_ok=True)
            else:
                self.client.delete_object(Bucket=self.config.AWS_S3_BUCKET, Key=storage_id)
        except (OSError, BotoCoreError, ClientError) as exc:
            raise DependencyError(f"Error deleting image {storage_id}: {exc}")


storage_service: StorageService = StorageService(settings)
