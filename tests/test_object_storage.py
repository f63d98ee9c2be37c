from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from app.core import object_storage
from app.core.exceptions import AssetUploadError


def test_upload_image_puts_object_and_returns_public_url():
    client = Mock()

    url = object_storage.upload_image(b"jpeg-bytes", "image/jpeg", client=client)

    kwargs = client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "generated-images"
    assert kwargs["Body"] == b"jpeg-bytes"
    assert kwargs["ContentType"] == "image/jpeg"
    assert kwargs["Key"].endswith(".jpg")
    assert url == f"http://localhost:9000/generated-images/{kwargs['Key']}"


def test_upload_image_uses_public_base_url(monkeypatch):
    monkeypatch.setattr(object_storage.settings, "ASSET_PUBLIC_BASE_URL", "https://cdn.example.com/assets/")
    url = object_storage.upload_image(b"png-bytes", "image/png", client=Mock())
    assert url.startswith("https://cdn.example.com/assets/")
    assert url.endswith(".png")


def test_upload_failure_is_an_asset_upload_error():
    client = Mock()
    client.put_object.side_effect = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")

    with pytest.raises(AssetUploadError) as exc_info:
        object_storage.upload_image(b"png-bytes", "image/png", client=client)
    assert exc_info.value.status_code == 500
