"""
Per-user storage of generated images.

``ImageStore`` exposes ``save``/``list``/``delete`` scoped to an owner id
that must be set first. Two backends are available, chosen by
``STORAGE_BACKEND``: the SQL database and a process-local dict.
"""
import logging
import threading
import uuid
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ImageNotFoundError, UnauthenticatedError
from app.crud import crud_generated_image
from app.schemas.generated_image import GeneratedImage, GeneratedImageCreate, as_utc
from app.schemas.generation import GenerationSettings

logger = logging.getLogger(__name__)


class ImageStore:

    def __init__(self, owner_id: Optional[str] = None):
        self.owner_id = owner_id

    def set_owner(self, owner_id: Optional[str]) -> None:
        self.owner_id = owner_id

    def _require_owner(self) -> str:
        if not self.owner_id:
            raise UnauthenticatedError()
        return self.owner_id

    def save(self, image: GeneratedImageCreate) -> GeneratedImage:
        raise NotImplementedError

    def list(self) -> List[GeneratedImage]:
        raise NotImplementedError

    def delete(self, image_id: str) -> None:
        raise NotImplementedError


def _from_row(row) -> GeneratedImage:
    return GeneratedImage(
        id=row.id,
        session_id=row.session_id,
        prompt=row.prompt,
        image_url=row.image_url,
        text_content=row.text_content,
        # SQLite returns naive datetimes; stored values are UTC
        timestamp=as_utc(row.timestamp),
        settings=GenerationSettings.model_validate(row.settings or {}),
    )


class DatabaseImageStore(ImageStore):

    def __init__(self, db: Session, owner_id: Optional[str] = None):
        super().__init__(owner_id)
        self.db = db

    def save(self, image: GeneratedImageCreate) -> GeneratedImage:
        owner_id = self._require_owner()
        row = crud_generated_image.create_generated_image(self.db, user_id=owner_id, image=image)
        logger.info("Saved generated image %s for user %s", row.id, owner_id)
        return _from_row(row)

    def list(self) -> List[GeneratedImage]:
        owner_id = self._require_owner()
        return [_from_row(row) for row in crud_generated_image.get_generated_images(self.db, user_id=owner_id)]

    def delete(self, image_id: str) -> None:
        owner_id = self._require_owner()
        if crud_generated_image.delete_generated_image(self.db, user_id=owner_id, image_id=image_id) is None:
            raise ImageNotFoundError(image_id)
        logger.info("Deleted generated image %s for user %s", image_id, owner_id)


class InMemoryImageStore(ImageStore):
    """Keeps records in a dict shared by every store built on the same backing map."""

    def __init__(self, owner_id: Optional[str] = None, records: Optional[Dict[str, Dict[str, GeneratedImage]]] = None):
        super().__init__(owner_id)
        self._records = records if records is not None else {}
        self._lock = threading.Lock()

    def save(self, image: GeneratedImageCreate) -> GeneratedImage:
        owner_id = self._require_owner()
        record = GeneratedImage(id=uuid.uuid4().hex, **image.model_dump())
        with self._lock:
            self._records.setdefault(owner_id, {})[record.id] = record
        return record

    def list(self) -> List[GeneratedImage]:
        owner_id = self._require_owner()
        with self._lock:
            records = list(self._records.get(owner_id, {}).values())
        # ties keep the most recently saved record first
        return sorted(reversed(records), key=lambda record: record.timestamp, reverse=True)

    def delete(self, image_id: str) -> None:
        owner_id = self._require_owner()
        with self._lock:
            if self._records.get(owner_id, {}).pop(image_id, None) is None:
                raise ImageNotFoundError(image_id)


_memory_records: Dict[str, Dict[str, GeneratedImage]] = {}


def get_image_store(db: Optional[Session] = None, owner_id: Optional[str] = None, backend: Optional[str] = None) -> ImageStore:
    backend = backend or settings.STORAGE_BACKEND
    if backend == "memory":
        return InMemoryImageStore(owner_id=owner_id, records=_memory_records)
    if backend == "database":
        if db is None:
            raise ValueError("A database session is required for the database image store")
        return DatabaseImageStore(db, owner_id=owner_id)
    raise ValueError(f"Unknown storage backend: {backend}")
