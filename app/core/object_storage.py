import uuid
from functools import lru_cache

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.exceptions import AssetUploadError

scheme = 'https' if settings.minio_secure else 'http'
endpoint_url = f'{scheme}://{settings.minio_endpoint}'

BUCKET_NAME = settings.minio_bucket

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


@lru_cache(maxsize=1)
def get_s3_client():
    return boto3.client(
        's3',
        endpoint_url=endpoint_url,
        aws_access_key_id=settings.minio_access_key,
        aws_secret_access_key=settings.minio_secret_key,
        config=Config(signature_version='s3v4'),
        use_ssl=settings.minio_secure
    )


def upload_image(data: bytes, content_type: str, client=None) -> str:
    """Store image bytes on the asset host and return their public URL."""
    client = client or get_s3_client()
    filename = f"{uuid.uuid4()}.{_EXTENSIONS.get(content_type, 'png')}"
    try:
        client.put_object(Bucket=BUCKET_NAME, Key=filename, Body=data, ContentType=content_type)
    except (BotoCoreError, ClientError) as e:
        raise AssetUploadError("Failed to upload image to asset host", details=str(e))

    base_url = settings.ASSET_PUBLIC_BASE_URL or f"{endpoint_url}/{BUCKET_NAME}"
    return f"{base_url.rstrip('/')}/{filename}"
