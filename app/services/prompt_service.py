"""
Prompt composition for marketing-image generation.

Turns the raw text typed by the user (plus an optional reference photo) into
the payload handed to the generation relay.
"""
import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional

from app.schemas.generation import GenerationSettings
from app.schemas.user_profile import UserProfileData

# Output-type presets and the aspect ratio each one implies
OUTPUT_TYPE_ASPECT_RATIOS = {
    "General": "Auto",
    "Image Ads": "1:1",
    "Banner Image": "16:9",
    "Product Image": "1:1",
    "Social Media Square": "1:1",
    "Social Media Story": "9:16",
}

AUTO_ASPECT_RATIO = "Auto"

MARKETING_INSTRUCTIONS = (
    "Create an ultra-high-resolution, crystal-clear, professionally detailed marketing image "
    "with perfectly readable text based on this description: {prompt}. "
    "Use ultra-sharp details, completely legible text, vibrant colors and photorealistic precision "
    "suitable for professional marketing use."
)

REFERENCE_IMAGE_INSTRUCTIONS = "Use the attached photo as the visual reference for the subject."

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?:;[\w-]+=[\w-]+)*;base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class ReferenceImage:
    data: bytes
    mime_type: str = "image/png"


@dataclass(frozen=True)
class ComposedPrompt:
    original: str
    text: str
    settings: GenerationSettings
    reference_image: Optional[ReferenceImage] = None


def apply_output_type(settings: GenerationSettings, output_type: str) -> GenerationSettings:
    """Select an output type; known presets also reset the aspect ratio."""
    aspect_ratio = OUTPUT_TYPE_ASPECT_RATIOS.get(output_type, settings.aspect_ratio)
    return settings.model_copy(update={"output_type": output_type, "aspect_ratio": aspect_ratio})


def parse_data_uri(value: str) -> ReferenceImage:
    match = _DATA_URI_RE.match(value.strip())
    if not match:
        raise ValueError("Reference image must be a base64 data URI")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("Reference image is not valid base64")
    return ReferenceImage(data=data, mime_type=match.group("mime") or "image/png")


def _brand_hints(profile: UserProfileData) -> str:
    hints = []
    if profile.brand_style:
        hints.append(f"Brand style: {', '.join(profile.brand_style)}.")
    if profile.brand_colors:
        hints.append(f"Brand colors: {', '.join(profile.brand_colors)}.")
    if profile.industry:
        hints.append(f"Industry: {profile.industry}.")
    if profile.niche:
        hints.append(f"Niche: {profile.niche}.")
    return " ".join(hints)


def compose_prompt(
    prompt: Optional[str],
    reference_image: Optional[ReferenceImage] = None,
    settings: Optional[GenerationSettings] = None,
    profile: Optional[UserProfileData] = None,
) -> Optional[ComposedPrompt]:
    """
    Build the relay payload for a user prompt.

    Returns None for a missing or whitespace-only prompt; callers must not
    contact the relay in that case.
    """
    if prompt is None or not prompt.strip():
        return None

    original = prompt.strip()
    settings = settings or GenerationSettings()

    parts = [MARKETING_INSTRUCTIONS.format(prompt=original)]
    if settings.output_type and settings.output_type != "General":
        parts.append(f"Format it as: {settings.output_type}.")
    if settings.aspect_ratio and settings.aspect_ratio != AUTO_ASPECT_RATIO:
        parts.append(f"Aspect ratio {settings.aspect_ratio}.")
    if profile is not None:
        hints = _brand_hints(profile)
        if hints:
            parts.append(hints)
    if reference_image is not None:
        parts.append(REFERENCE_IMAGE_INSTRUCTIONS)

    return ComposedPrompt(
        original=original,
        text=" ".join(parts),
        settings=settings,
        reference_image=reference_image,
    )
