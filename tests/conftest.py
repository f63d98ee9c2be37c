import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["STORAGE_BACKEND"] = "database"
os.environ["EMAIL_PROVIDER"] = "sendgrid"
os.environ["SENDGRID_API_KEY"] = "SG.test-key"
os.environ["ASSET_UPLOAD_ENABLED"] = "false"

import base64
import io
import uuid

import pytest
from PIL import Image

from app.core.database import Base, SessionLocal, engine
from app import models  # noqa: F401


def make_png(size=(2, 2), color=(255, 0, 0)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def png_b64(png_bytes):
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def user_id():
    return f"user-{uuid.uuid4().hex[:8]}"
