"""
Image-generation relay.

Forwards a composed prompt to the configured generative-image provider,
pulls the image out of the vendor response and normalizes it into a single
representation: a base64 ``data:`` URI, or an asset-host URL when
re-uploading is enabled.

No retry, backoff or timeout is applied. Every failure is raised once as a
``RelayError``; the user re-submits the prompt to try again.
"""
import asyncio
import base64
import binascii
import io
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import httpx
from PIL import Image, UnidentifiedImageError

from app.core.config import settings
from app.core.exceptions import (
    ImageExtractionError,
    ImageTooLargeError,
    MissingPromptError,
    ProviderConfigurationError,
    RelayError,
    UpstreamProviderError,
)
from app.core import object_storage
from app.llm_providers.base import ExtractedImage, ImageProvider
from app.llm_providers.gemini_provider import GeminiImageProvider
from app.llm_providers.imagen_provider import ImagenProvider
from app.schemas.generation import GenerateImageRequest, GenerationSettings
from app.schemas.user_profile import UserProfileData
from app.services.prompt_service import ComposedPrompt, apply_output_type, compose_prompt, parse_data_uri

logger = logging.getLogger(__name__)

PROVIDERS = {
    GeminiImageProvider.name: GeminiImageProvider,
    ImagenProvider.name: ImagenProvider,
}


@dataclass(frozen=True)
class ImageResult:
    image_url: str
    prompt: str
    text_content: Optional[str] = None
    mime_type: str = "image/png"
    size: int = 0


def get_image_provider(name: str, api_key: str) -> ImageProvider:
    provider_cls = PROVIDERS.get(name)
    if provider_cls is None:
        raise ProviderConfigurationError(
            f"Unknown image provider: {name}",
            details={"available": sorted(PROVIDERS)},
        )
    model = settings.IMAGEN_MODEL if provider_cls is ImagenProvider else settings.GEMINI_IMAGE_MODEL
    return provider_cls(api_key=api_key, base_url=settings.GENERATIVE_API_BASE_URL, model=model)


def settings_from_request(request: GenerateImageRequest) -> GenerationSettings:
    generation_settings = GenerationSettings()
    if request.output_type:
        generation_settings = apply_output_type(generation_settings, request.output_type)
    if request.aspect_ratio:
        generation_settings = generation_settings.model_copy(update={"aspect_ratio": request.aspect_ratio})
    if request.temperature is not None:
        generation_settings = generation_settings.model_copy(update={"temperature": request.temperature})
    return generation_settings


def _to_data_uri(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def _sniff_mime_type(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError):
        raise ImageExtractionError(details="Fetched content is not a recognizable image")
    return Image.MIME.get(image_format, "image/png")


class ImageGenerationService:

    def __init__(
        self,
        provider: ImageProvider,
        max_image_bytes: int = 5 * 1024 * 1024,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        upload_assets: bool = False,
        uploader: Optional[Callable[[bytes, str], str]] = None,
    ):
        self.provider = provider
        self.max_image_bytes = max_image_bytes
        self.timeout = timeout
        self.transport = transport
        self.upload_assets = upload_assets
        self.uploader = uploader or object_storage.upload_image

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def relay(self, request: GenerateImageRequest, profile: Optional[UserProfileData] = None) -> ImageResult:
        """Handle a raw ``{prompt, ...}`` request body end to end."""
        reference_image = None
        if request.reference_image:
            try:
                reference_image = parse_data_uri(request.reference_image)
            except ValueError as e:
                raise RelayError("Invalid reference image", details=str(e), status_code=400)

        composed = compose_prompt(
            request.prompt,
            reference_image=reference_image,
            settings=settings_from_request(request),
            profile=profile,
        )
        return await self.generate_image(composed)

    async def generate_image(self, composed: Optional[ComposedPrompt]) -> ImageResult:
        if composed is None:
            raise MissingPromptError()
        if not self.provider.is_configured:
            logger.error("Image generation requested but no API key is configured for %s", self.provider.name)
            raise ProviderConfigurationError(
                "Image generation service is not configured",
                details="GEMINI_API_KEY is not set",
            )

        async with self._client() as client:
            body = await self._call_provider(client, composed)
            extracted = self.provider.extract_image(body)
            if extracted is None:
                logger.error("No image found in %s response", self.provider.name)
                raise ImageExtractionError(details=self._summarize(body))
            data, mime_type = await self._resolve_image(client, extracted)

        if self.upload_assets:
            image_url = await asyncio.to_thread(self.uploader, data, mime_type)
        else:
            image_url = _to_data_uri(data, mime_type)

        logger.info("Generated %s image (%d bytes) via %s", mime_type, len(data), self.provider.name)
        return ImageResult(
            image_url=image_url,
            prompt=composed.original,
            text_content=extracted.text or composed.original,
            mime_type=mime_type,
            size=len(data),
        )

    async def _call_provider(self, client: httpx.AsyncClient, composed: ComposedPrompt):
        try:
            response = await client.post(
                self.provider.endpoint(),
                json=self.provider.build_payload(composed),
                headers=self.provider.headers(),
            )
        except httpx.HTTPError as e:
            logger.error("Request to %s failed: %s", self.provider.name, e)
            raise UpstreamProviderError("Server error occurred while generating image", details=str(e))

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            details = body if body is not None else response.text
            message = self.provider.error_message(body) or f"Image provider returned status {response.status_code}"
            logger.error("%s responded with %s: %s", self.provider.name, response.status_code, details)
            raise UpstreamProviderError(message, details=details, status_code=response.status_code)

        if body is None:
            raise ImageExtractionError(details="Provider response was not valid JSON")
        return body

    async def _resolve_image(self, client: httpx.AsyncClient, extracted: ExtractedImage) -> Tuple[bytes, str]:
        if extracted.is_remote:
            return await self._fetch_remote(client, extracted.value)

        if extracted.value.startswith("data:"):
            try:
                reference = parse_data_uri(extracted.value)
            except ValueError as e:
                raise ImageExtractionError(details=str(e))
            data, mime_type = reference.data, reference.mime_type
        else:
            try:
                data = base64.b64decode(extracted.value, validate=True)
            except (binascii.Error, ValueError):
                raise ImageExtractionError(details="Image payload is not valid base64")
            mime_type = extracted.mime_type

        self._check_size(len(data))
        return data, mime_type

    async def _fetch_remote(self, client: httpx.AsyncClient, url: str) -> Tuple[bytes, str]:
        try:
            async with client.stream("GET", url) as response:
                if response.is_error:
                    raise UpstreamProviderError(
                        "Failed to download generated image",
                        details={"url": url, "status": response.status_code},
                    )
                declared = response.headers.get("content-length")
                if declared and declared.isdigit():
                    self._check_size(int(declared))

                buffer = bytearray()
                async for chunk in response.aiter_bytes():
                    buffer.extend(chunk)
                    self._check_size(len(buffer))
                content_type = response.headers.get("content-type", "").split(";")[0].strip()
        except httpx.HTTPError as e:
            logger.error("Downloading generated image from %s failed: %s", url, e)
            raise UpstreamProviderError("Failed to download generated image", details=str(e))

        data = bytes(buffer)
        mime_type = content_type if content_type.startswith("image/") else _sniff_mime_type(data)
        return data, mime_type

    def _check_size(self, size: int) -> None:
        if size > self.max_image_bytes:
            logger.warning("Generated image of %d bytes exceeds limit of %d", size, self.max_image_bytes)
            raise ImageTooLargeError(size=size, limit=self.max_image_bytes)

    @staticmethod
    def _summarize(body) -> dict:
        if isinstance(body, dict):
            summary = {"keys": sorted(body.keys())}
            candidates = body.get("candidates")
            if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
                summary["finishReason"] = candidates[0].get("finishReason")
            return summary
        return {"type": type(body).__name__}


def get_image_generation_service() -> ImageGenerationService:
    return ImageGenerationService(
        provider=get_image_provider(settings.IMAGE_PROVIDER, settings.GEMINI_API_KEY),
        max_image_bytes=settings.MAX_IMAGE_BYTES,
        timeout=settings.GENERATION_TIMEOUT,
        upload_assets=settings.ASSET_UPLOAD_ENABLED,
    )
