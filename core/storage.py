# File Storage for uploads (profile pictures, logos, KYC documents, proof files, chat attachments)
# Local disk by default, MinIO (S3 compatible) when STORAGE_BACKEND=minio.

import logging
import os
import uuid
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from config.app_config import UPLOAD_DIR, MAX_FILE_SIZE, STORAGE_BACKEND
from core.errors import ValidationError

logger = logging.getLogger(__name__)

MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "http://minio:9000")
# Public endpoint is what the browser will reach.
MINIO_PUBLIC_ENDPOINT = os.getenv("MINIO_PUBLIC_ENDPOINT", MINIO_ENDPOINT)
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "")
MINIO_BUCKET = os.getenv("MINIO_BUCKET", "marketplace-uploads")
MINIO_REGION = os.getenv("MINIO_REGION", "us-east-1")

IMAGE_FIELDS = {"profilePicture", "logo"}
KYC_FIELDS = {"kycDocument"}


@dataclass
class IncomingFile:
    """An uploaded file already read into memory."""
    field: str
    filename: str
    content_type: str
    data: bytes

    @property
    def is_image(self):
        return (self.content_type or "").startswith("image/")


def validate_upload(file: IncomingFile, max_size: int = MAX_FILE_SIZE):
    """Reject oversized files and wrong types for image/KYC fields."""
    if len(file.data) > max_size:
        raise ValidationError("File too large", {"field": file.field, "max_size": max_size})

    if file.field in IMAGE_FIELDS and not file.is_image:
        raise ValidationError("Only image files are allowed for profile pictures and logos")

    if file.field in KYC_FIELDS and not (file.is_image or file.content_type == "application/pdf"):
        raise ValidationError("Only image files and PDFs are allowed for KYC documents")


def folder_for(field: str) -> str:
    if field in IMAGE_FIELDS:
        return "images"
    if field in KYC_FIELDS:
        return "documents"
    return "misc"


def build_object_name(file: IncomingFile) -> str:
    """<field>-<millis>-<random><ext>, unique enough for concurrent uploads."""
    _, ext = os.path.splitext(file.filename or "")
    millis = int(datetime.utcnow().timestamp() * 1000)
    return f"{file.field}-{millis}-{random.randint(0, 10**9)}{ext.lower()}"


class FileStorage:
    """Stores an uploaded file and returns an opaque reference (path or URL)."""

    def store(self, file: IncomingFile, folder: Optional[str] = None) -> str:
        raise NotImplementedError

    def delete(self, reference: str):
        """Remove a stored file after a failed write. Implementations log failures instead of raising."""
        raise NotImplementedError


class LocalFileStorage(FileStorage):
    def __init__(self, root: str = UPLOAD_DIR):
        self.root = root

    def store(self, file: IncomingFile, folder: Optional[str] = None) -> str:
        validate_upload(file)
        folder = folder or folder_for(file.field)
        directory = os.path.join(self.root, folder)
        os.makedirs(directory, exist_ok=True)

        name = build_object_name(file)
        with open(os.path.join(directory, name), "wb") as fh:
            fh.write(file.data)
        return f"uploads/{folder}/{name}"

    def delete(self, reference: str):
        relative = reference[len("uploads/"):] if reference.startswith("uploads/") else reference
        try:
            os.remove(os.path.join(self.root, *relative.split("/")))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {reference}: {e}")


class MinioFileStorage(FileStorage):
    def __init__(self, bucket: str = MINIO_BUCKET):
        self.bucket = bucket
        self._bucket_checked = False

    def _get_client(self, endpoint: str = MINIO_ENDPOINT):
        return boto3.client(
            "s3",
            endpoint_url=endpoint,
            aws_access_key_id=MINIO_ACCESS_KEY,
            aws_secret_access_key=MINIO_SECRET_KEY,
            config=Config(signature_version="s3v4"),
            region_name=MINIO_REGION,
        )

    def ensure_bucket_exists(self, client):
        """Create the bucket if it doesn't already exist."""
        if self._bucket_checked:
            return
        try:
            client.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            if error_code in ("404", "NoSuchBucket"):
                client.create_bucket(Bucket=self.bucket)
            else:
                raise
        self._bucket_checked = True

    def store(self, file: IncomingFile, folder: Optional[str] = None) -> str:
        validate_upload(file)
        client = self._get_client()
        self.ensure_bucket_exists(client)

        folder = folder or folder_for(file.field)
        object_key = f"{folder}/{datetime.utcnow().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8]}-{build_object_name(file)}"
        client.put_object(
            Bucket=self.bucket,
            Key=object_key,
            Body=file.data,
            ContentType=file.content_type or "application/octet-stream",
        )
        return f"{MINIO_PUBLIC_ENDPOINT.rstrip('/')}/{self.bucket}/{object_key}"

    def delete(self, reference: str):
        object_key = reference.split(f"/{self.bucket}/", 1)[-1]
        try:
            self._get_client().delete_object(Bucket=self.bucket, Key=object_key)
        except ClientError as e:
            logger.warning(f"Could not remove {object_key} from {self.bucket}: {e}")


_storage: Optional[FileStorage] = None


def get_file_storage() -> FileStorage:
    """FastAPI dependency returning the configured storage backend."""
    global _storage
    if _storage is None:
        _storage = MinioFileStorage() if STORAGE_BACKEND == "minio" else LocalFileStorage()
    return _storage


async def read_upload(upload, field: str) -> IncomingFile:
    """Read a FastAPI UploadFile into an IncomingFile."""
    data = await upload.read()
    return IncomingFile(
        field=field,
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )
