import asyncio
import base64
import json

import httpx
import pytest
from unittest.mock import Mock

from app.core.exceptions import (
    ImageExtractionError,
    ImageTooLargeError,
    MissingPromptError,
    ProviderConfigurationError,
    RelayError,
    UpstreamProviderError,
)
from app.llm_providers.gemini_provider import GeminiImageProvider
from app.llm_providers.imagen_provider import ImagenProvider
from app.schemas.generation import GenerateImageRequest, GenerationSettings
from app.services.image_generation_service import ImageGenerationService, get_image_provider
from app.services.prompt_service import ReferenceImage, apply_output_type, compose_prompt

BASE_URL = "https://generativelanguage.test/v1beta"
FIVE_MB = 5 * 1024 * 1024


def gemini(api_key="test-key"):
    return GeminiImageProvider(api_key=api_key, base_url=BASE_URL, model="gemini-2.5-flash-image-preview")


def imagen(api_key="test-key"):
    return ImagenProvider(api_key=api_key, base_url=BASE_URL, model="imagen-3.0-generate-001")


def gemini_body(data, mime_type="image/png", text=None):
    parts = []
    if text:
        parts.append({"text": text})
    parts.append({"inlineData": {"mimeType": mime_type, "data": data}})
    return {"candidates": [{"content": {"parts": parts}, "finishReason": "STOP"}]}


class Recorder:
    """httpx handler that records requests and replays canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def service(provider, recorder, **kwargs):
    return ImageGenerationService(provider=provider, transport=httpx.MockTransport(recorder), **kwargs)


def run(coro):
    return asyncio.run(coro)


def test_gemini_success_returns_data_uri_and_echoes_prompt(png_b64):
    recorder = Recorder(httpx.Response(200, json=gemini_body(png_b64, text="Here is your car")))
    composed = compose_prompt("a red sports car on a beach")

    result = run(service(gemini(), recorder).generate_image(composed))

    assert result.image_url == f"data:image/png;base64,{png_b64}"
    assert result.prompt == "a red sports car on a beach"
    assert result.text_content == "Here is your car"

    request = recorder.requests[0]
    assert str(request.url) == f"{BASE_URL}/models/gemini-2.5-flash-image-preview:generateContent"
    assert request.headers["x-goog-api-key"] == "test-key"
    payload = json.loads(request.content)
    assert "a red sports car on a beach" in payload["contents"][0]["parts"][0]["text"]
    assert payload["generationConfig"]["temperature"] == 1.0
    assert "imageConfig" not in payload["generationConfig"]


def test_gemini_text_content_defaults_to_prompt(png_b64):
    recorder = Recorder(httpx.Response(200, json=gemini_body(png_b64)))
    result = run(service(gemini(), recorder).generate_image(compose_prompt("  coffee mug  ")))
    assert result.prompt == "coffee mug"
    assert result.text_content == "coffee mug"


def test_gemini_sends_reference_image_and_aspect_ratio(png_b64):
    recorder = Recorder(httpx.Response(200, json=gemini_body(png_b64)))
    settings = apply_output_type(GenerationSettings(), "Social Media Story")
    reference = ReferenceImage(data=b"\x89PNG-reference", mime_type="image/png")

    run(service(gemini(), recorder).generate_image(compose_prompt("sneakers", reference_image=reference, settings=settings)))

    payload = json.loads(recorder.requests[0].content)
    inline = payload["contents"][0]["parts"][1]["inlineData"]
    assert base64.b64decode(inline["data"]) == b"\x89PNG-reference"
    assert payload["generationConfig"]["imageConfig"] == {"aspectRatio": "9:16"}


def test_imagen_predict_shape(png_b64):
    recorder = Recorder(httpx.Response(200, json={"predictions": [{"bytesBase64Encoded": png_b64, "mimeType": "image/png"}]}))
    settings = apply_output_type(GenerationSettings(), "Image Ads")

    result = run(service(imagen(), recorder).generate_image(compose_prompt("summer sale banner", settings=settings)))

    assert result.image_url.startswith("data:image/png;base64,")
    request = recorder.requests[0]
    assert request.url.path.endswith("/models/imagen-3.0-generate-001:predict")
    payload = json.loads(request.content)
    assert payload["parameters"] == {"sampleCount": 1, "aspectRatio": "1:1"}
    assert "summer sale banner" in payload["instances"][0]["prompt"]


def test_blank_prompt_is_rejected_without_calling_provider():
    recorder = Recorder()
    with pytest.raises(MissingPromptError) as exc_info:
        run(service(gemini(), recorder).generate_image(compose_prompt("   ")))
    assert exc_info.value.status_code == 400
    assert recorder.requests == []


def test_relay_rejects_missing_prompt_field():
    recorder = Recorder()
    with pytest.raises(MissingPromptError):
        run(service(gemini(), recorder).relay(GenerateImageRequest()))
    assert recorder.requests == []


def test_missing_api_key_is_a_configuration_error():
    recorder = Recorder()
    with pytest.raises(ProviderConfigurationError) as exc_info:
        run(service(gemini(api_key=""), recorder).generate_image(compose_prompt("a cat")))
    assert exc_info.value.status_code == 500
    assert recorder.requests == []


def test_rate_limit_status_is_passed_through():
    body = {"error": {"code": 429, "message": "Resource has been exhausted", "status": "RESOURCE_EXHAUSTED"}}
    recorder = Recorder(httpx.Response(429, json=body))

    with pytest.raises(UpstreamProviderError) as exc_info:
        run(service(gemini(), recorder).generate_image(compose_prompt("a cat")))

    error = exc_info.value
    assert error.status_code == 429
    assert error.message == "Resource has been exhausted"
    assert error.details == body
    assert len(recorder.requests) == 1


def test_upstream_error_status_is_passed_through_once():
    recorder = Recorder(httpx.Response(503, text="upstream unavailable"))
    with pytest.raises(UpstreamProviderError) as exc_info:
        run(service(gemini(), recorder).generate_image(compose_prompt("a cat")))
    assert exc_info.value.status_code == 503
    assert exc_info.value.details == "upstream unavailable"
    assert len(recorder.requests) == 1


def test_transport_failure_is_a_server_error():
    recorder = Recorder(httpx.ConnectError("connection refused"))
    with pytest.raises(UpstreamProviderError) as exc_info:
        run(service(gemini(), recorder).generate_image(compose_prompt("a cat")))
    assert exc_info.value.status_code == 500


def test_response_without_image_cannot_be_extracted():
    recorder = Recorder(httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "I can't draw that"}]}, "finishReason": "SAFETY"}]}))
    with pytest.raises(ImageExtractionError) as exc_info:
        run(service(gemini(), recorder).generate_image(compose_prompt("a cat")))
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Could not extract image from response"
    assert exc_info.value.details["finishReason"] == "SAFETY"


def test_imagen_response_without_predictions_cannot_be_extracted():
    recorder = Recorder(httpx.Response(200, json={"predictions": []}))
    with pytest.raises(ImageExtractionError):
        run(service(imagen(), recorder).generate_image(compose_prompt("a cat")))


def test_remote_image_url_is_fetched_and_reencoded(png_bytes):
    recorder = Recorder(
        httpx.Response(200, json={"candidates": [{"content": {"parts": [
            {"fileData": {"mimeType": "image/png", "fileUri": "https://cdn.test/generated/1.png"}},
        ]}}]}),
        httpx.Response(200, content=png_bytes, headers={"content-type": "image/png"}),
    )

    result = run(service(gemini(), recorder).generate_image(compose_prompt("a cat")))

    assert str(recorder.requests[1].url) == "https://cdn.test/generated/1.png"
    assert result.image_url == "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
    assert result.size == len(png_bytes)


def test_remote_image_without_content_type_is_sniffed(png_bytes):
    recorder = Recorder(
        httpx.Response(200, json={"predictions": [{"bytesBase64Encoded": "https://cdn.test/a"}]}),
        httpx.Response(200, content=png_bytes, headers={"content-type": "application/octet-stream"}),
    )
    result = run(service(imagen(), recorder).generate_image(compose_prompt("a cat")))
    assert result.mime_type == "image/png"
    assert result.image_url.startswith("data:image/png;base64,")


def test_remote_image_over_limit_is_rejected(png_bytes):
    recorder = Recorder(
        httpx.Response(200, json={"predictions": [{"bytesBase64Encoded": "https://cdn.test/big.png"}]}),
        httpx.Response(200, content=b"x" * 2048, headers={"content-type": "image/png"}),
    )
    with pytest.raises(ImageTooLargeError) as exc_info:
        run(service(imagen(), recorder, max_image_bytes=1024).generate_image(compose_prompt("a cat")))
    assert exc_info.value.status_code == 413


def test_inline_image_over_five_megabytes_is_rejected():
    oversized = base64.b64encode(b"\0" * (FIVE_MB + 1)).decode("ascii")
    recorder = Recorder(httpx.Response(200, json=gemini_body(oversized)))

    with pytest.raises(ImageTooLargeError) as exc_info:
        run(service(gemini(), recorder).generate_image(compose_prompt("a cat")))

    assert exc_info.value.status_code == 413
    assert exc_info.value.size == FIVE_MB + 1
    assert exc_info.value.limit == FIVE_MB


def test_invalid_base64_payload_cannot_be_extracted():
    recorder = Recorder(httpx.Response(200, json=gemini_body("not base64 !!")))
    with pytest.raises(ImageExtractionError):
        run(service(gemini(), recorder).generate_image(compose_prompt("a cat")))


def test_asset_upload_replaces_data_uri(png_b64, png_bytes):
    recorder = Recorder(httpx.Response(200, json=gemini_body(png_b64)))
    uploader = Mock(return_value="https://assets.test/generated-images/abc.png")

    result = run(service(gemini(), recorder, upload_assets=True, uploader=uploader).generate_image(compose_prompt("a cat")))

    uploader.assert_called_once_with(png_bytes, "image/png")
    assert result.image_url == "https://assets.test/generated-images/abc.png"


def test_relay_builds_settings_from_request(png_b64):
    recorder = Recorder(httpx.Response(200, json=gemini_body(png_b64)))
    request = GenerateImageRequest(prompt="a cat", outputType="Banner Image", temperature=0.4)

    run(service(gemini(), recorder).relay(request))

    payload = json.loads(recorder.requests[0].content)
    assert payload["generationConfig"]["temperature"] == 0.4
    assert payload["generationConfig"]["imageConfig"] == {"aspectRatio": "16:9"}


def test_relay_rejects_malformed_reference_image():
    recorder = Recorder()
    request = GenerateImageRequest(prompt="a cat", referenceImage="not-a-data-uri")
    with pytest.raises(RelayError) as exc_info:
        run(service(gemini(), recorder).relay(request))
    assert exc_info.value.status_code == 400
    assert recorder.requests == []


def test_unknown_provider_is_a_configuration_error():
    with pytest.raises(ProviderConfigurationError):
        get_image_provider("dall-e", "key")


def test_inline_image_of_exactly_five_megabytes_is_accepted():
    exact = base64.b64encode(b"\0" * FIVE_MB).decode("ascii")
    recorder = Recorder(httpx.Response(200, json=gemini_body(exact)))

    result = run(service(gemini(), recorder).generate_image(compose_prompt("a cat")))

    assert result.size == FIVE_MB


def test_declared_remote_size_over_limit_is_rejected_before_download():
    # body is small; only the declared length exceeds the limit
    recorder = Recorder(
        httpx.Response(200, json={"predictions": [{"bytesBase64Encoded": "https://cdn.test/big.png"}]}),
        httpx.Response(200, content=b"x" * 16, headers={"content-type": "image/png", "content-length": "4096"}),
    )
    with pytest.raises(ImageTooLargeError) as exc_info:
        run(service(imagen(), recorder, max_image_bytes=1024).generate_image(compose_prompt("a cat")))
    assert exc_info.value.size == 4096
