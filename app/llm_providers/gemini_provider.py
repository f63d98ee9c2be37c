import base64
from typing import Any, Optional

from app.llm_providers.base import ExtractedImage, ImageProvider
from app.services.prompt_service import AUTO_ASPECT_RATIO, ComposedPrompt


class GeminiImageProvider(ImageProvider):
    """Gemini ``:generateContent`` with image output ("Nano Banana")."""
    name = "gemini"

    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(self, composed: ComposedPrompt) -> dict:
        parts = [{"text": composed.text}]
        if composed.reference_image is not None:
            parts.append({
                "inlineData": {
                    "mimeType": composed.reference_image.mime_type,
                    "data": base64.b64encode(composed.reference_image.data).decode("ascii"),
                }
            })

        generation_config = {
            "temperature": composed.settings.temperature,
            "responseModalities": ["TEXT", "IMAGE"],
        }
        if composed.settings.aspect_ratio and composed.settings.aspect_ratio != AUTO_ASPECT_RATIO:
            generation_config["imageConfig"] = {"aspectRatio": composed.settings.aspect_ratio}

        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config,
        }

    def extract_image(self, data: Any) -> Optional[ExtractedImage]:
        if not isinstance(data, dict):
            return None
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []

        texts = []
        image = None
        for part in parts:
            if not isinstance(part, dict):
                continue
            if part.get("text"):
                texts.append(part["text"])
                continue
            if image is not None:
                continue
            inline = part.get("inlineData") or part.get("inline_data")
            if inline and inline.get("data"):
                image = (inline["data"], inline.get("mimeType") or inline.get("mime_type") or "image/png")
                continue
            file_data = part.get("fileData") or part.get("file_data")
            if file_data and (file_data.get("fileUri") or file_data.get("file_uri")):
                image = (
                    file_data.get("fileUri") or file_data.get("file_uri"),
                    file_data.get("mimeType") or file_data.get("mime_type") or "image/png",
                )

        if image is None:
            return None
        text = "\n".join(texts) if texts else None
        return ExtractedImage(value=image[0], mime_type=image[1], text=text)
