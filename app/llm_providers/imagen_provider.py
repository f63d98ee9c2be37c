import logging
from typing import Any, Optional

from app.llm_providers.base import ExtractedImage, ImageProvider
from app.services.prompt_service import AUTO_ASPECT_RATIO, ComposedPrompt

logger = logging.getLogger(__name__)


class ImagenProvider(ImageProvider):
    """Imagen ``:predict`` endpoint; text-only, reference photos are not sent."""
    name = "imagen"

    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:predict"

    def build_payload(self, composed: ComposedPrompt) -> dict:
        if composed.reference_image is not None:
            logger.info("Imagen does not accept reference images; ignoring the attached photo")

        parameters = {"sampleCount": 1}
        if composed.settings.aspect_ratio and composed.settings.aspect_ratio != AUTO_ASPECT_RATIO:
            parameters["aspectRatio"] = composed.settings.aspect_ratio

        return {
            "instances": [{"prompt": composed.text}],
            "parameters": parameters,
        }

    def extract_image(self, data: Any) -> Optional[ExtractedImage]:
        if not isinstance(data, dict):
            return None
        predictions = data.get("predictions") or []
        if not predictions or not isinstance(predictions[0], dict):
            return None
        prediction = predictions[0]
        encoded = prediction.get("bytesBase64Encoded")
        if not encoded:
            return None
        return ExtractedImage(value=encoded, mime_type=prediction.get("mimeType") or "image/png")
