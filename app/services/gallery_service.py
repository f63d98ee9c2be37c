"""
In-memory gallery state and the generation session that feeds it.

The generate view and the history view read the same newest-first list.
New images are inserted locally first and written through to the image
store afterwards; deletes remove the local entry before the remote one and
fall back to a full reload when the remote delete fails.
"""
import logging
import time
import uuid
from typing import List, Optional

from app.core.exceptions import RelayError
from app.schemas.generated_image import GeneratedImage, GeneratedImageCreate
from app.schemas.generation import GenerationSettings
from app.schemas.user_profile import UserProfileData
from app.services.image_generation_service import ImageGenerationService
from app.services.image_store import ImageStore
from app.services.prompt_service import ReferenceImage, apply_output_type, compose_prompt

logger = logging.getLogger(__name__)


class GalleryState:

    def __init__(self, store: ImageStore):
        self.store = store
        self.images: List[GeneratedImage] = []

    def generate_view(self) -> List[GeneratedImage]:
        return list(self.images)

    def history_view(self) -> List[GeneratedImage]:
        return list(self.images)

    def get(self, image_id: str) -> Optional[GeneratedImage]:
        return next((image for image in self.images if image.id == image_id), None)

    def reload(self) -> List[GeneratedImage]:
        self.images = self.store.list()
        return self.generate_view()

    def add(self, image: GeneratedImage) -> GeneratedImage:
        self.images.insert(0, image)
        try:
            saved = self.store.save(GeneratedImageCreate(**image.model_dump(exclude={"id"})))
        except Exception:
            # local and remote stay out of sync until the next reload
            logger.exception("Failed to persist generated image %s", image.id)
            return image

        # swap the local id for the store-assigned one
        for index, existing in enumerate(self.images):
            if existing is image:
                self.images[index] = saved
                break
        return saved

    def remove(self, image_id: str) -> None:
        self.images = [image for image in self.images if image.id != image_id]
        try:
            self.store.delete(image_id)
        except Exception:
            logger.exception("Failed to delete generated image %s; reloading gallery", image_id)
            try:
                self.reload()
            except Exception:
                logger.exception("Gallery reload failed")


class GenerationSession:
    """One user's generation session: settings, pending flag and gallery."""

    def __init__(
        self,
        generator: ImageGenerationService,
        gallery: GalleryState,
        settings: Optional[GenerationSettings] = None,
        profile: Optional[UserProfileData] = None,
    ):
        self.generator = generator
        self.gallery = gallery
        self.settings = settings or GenerationSettings()
        self.profile = profile
        self.session_id = uuid.uuid4().hex
        self.is_generating = False
        self.last_error: Optional[RelayError] = None

    def select_output_type(self, output_type: str) -> GenerationSettings:
        self.settings = apply_output_type(self.settings, output_type)
        return self.settings

    def set_aspect_ratio(self, aspect_ratio: str) -> GenerationSettings:
        self.settings = self.settings.model_copy(update={"aspect_ratio": aspect_ratio})
        return self.settings

    def set_temperature(self, temperature: float) -> GenerationSettings:
        self.settings = self.settings.model_copy(update={"temperature": temperature})
        return self.settings

    def can_submit(self, prompt: Optional[str]) -> bool:
        return bool(prompt and prompt.strip()) and not self.is_generating

    async def submit(self, prompt: Optional[str], reference_image: Optional[ReferenceImage] = None) -> Optional[GeneratedImage]:
        """
        Generate an image for ``prompt`` and add it to the gallery.

        Returns None without contacting the relay for a blank prompt or while
        another generation is pending. Relay failures are recorded in
        ``last_error`` and re-raised.
        """
        if not self.can_submit(prompt):
            return None

        composed = compose_prompt(prompt, reference_image=reference_image, settings=self.settings, profile=self.profile)
        self.is_generating = True
        self.last_error = None
        try:
            result = await self.generator.generate_image(composed)
        except RelayError as e:
            self.last_error = e
            logger.warning("Generation failed: %s", e.message)
            raise
        finally:
            self.is_generating = False

        image = GeneratedImage(
            id=str(int(time.time() * 1000)),
            session_id=self.session_id,
            prompt=result.prompt,
            image_url=result.image_url,
            text_content=result.text_content,
            settings=composed.settings,
        )
        return self.gallery.add(image)
