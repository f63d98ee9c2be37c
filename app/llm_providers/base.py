"""
Common interface for generative-image vendors.

Each provider knows how to address its endpoint, how to shape the request
body and where the image lives in its response. Everything else (HTTP,
decoding, size limits, asset upload) is handled by the relay service.
"""
from dataclasses import dataclass
from typing import Any, Optional

from app.services.prompt_service import ComposedPrompt


@dataclass(frozen=True)
class ExtractedImage:
    # base64 payload, data: URI or remote URL
    value: str
    mime_type: str = "image/png"
    text: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return self.value.startswith(("http://", "https://"))


class ImageProvider:
    name = "base"

    def __init__(self, api_key: str, base_url: str, model: str):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def endpoint(self) -> str:
        raise NotImplementedError

    def headers(self) -> dict:
        return {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

    def build_payload(self, composed: ComposedPrompt) -> dict:
        raise NotImplementedError

    def extract_image(self, data: Any) -> Optional[ExtractedImage]:
        """Return the image found in a response body, or None."""
        raise NotImplementedError

    @staticmethod
    def error_message(body: Any) -> Optional[str]:
        # Google APIs: {"error": {"code": 429, "message": "...", "status": "RESOURCE_EXHAUSTED"}}
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                return error.get("message")
            if isinstance(error, str):
                return error
        return None
