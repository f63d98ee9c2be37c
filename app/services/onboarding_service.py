"""
Onboarding wizard.

A linear sequence of steps that collects the user's role, industry, niche,
intended use cases, platforms, image types and brand style. Every step
between the welcome and the summary requires an answer before moving on.
An edit-mode wizard opens on the summary and can jump back to any step.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from app.schemas.onboarding import OnboardingStep

logger = logging.getLogger(__name__)

ROLES = ["Business Owner", "Marketing Manager", "Content Creator", "Social Media Manager", "Freelancer/Agency", "Designer"]
INDUSTRIES = [
    "E-commerce/Retail", "Food & Beverage", "Real Estate", "Health & Wellness", "Technology/SaaS",
    "Fashion & Beauty", "Finance/Insurance", "Education", "Hospitality/Travel", "Professional Services",
]
USE_CASES = [
    "Social media posts", "Paid advertising", "Website/landing pages", "Email marketing",
    "Product launches", "Blog content", "Event promotions", "Seasonal campaigns",
]
PLATFORMS = ["Instagram", "Facebook", "LinkedIn", "Twitter/X", "Pinterest", "TikTok", "Website", "Email newsletters"]
IMAGE_TYPES = [
    "Product showcase", "Lifestyle/contextual", "Promotional/sale announcements", "Text-based graphics",
    "Behind-the-scenes", "Testimonial graphics",
]
BRAND_STYLES = [
    "Minimalist/Clean", "Bold/Vibrant", "Elegant/Luxury", "Fun/Playful", "Professional/Corporate",
    "Earthy/Natural", "Modern/Futuristic", "Vintage/Retro",
]

STEPS: List[OnboardingStep] = [
    OnboardingStep(index=0, key="welcome", title="Welcome to Marky AI Studio",
                   subtitle="Let's get you started with AI-powered content creation"),
    OnboardingStep(index=1, key="role", field="role", title="What's your role?",
                   subtitle="This helps us tailor the experience", options=ROLES),
    OnboardingStep(index=2, key="industry", field="industry", title="What industry are you in?",
                   subtitle="This helps us understand your visual needs", options=INDUSTRIES),
    OnboardingStep(index=3, key="niche", field="niche", title="Tell us about your niche",
                   subtitle="Be specific to get better results"),
    OnboardingStep(index=4, key="use-cases", field="useCases", title="What will you use these images for?",
                   subtitle="Select all that apply", options=USE_CASES, multi_select=True),
    OnboardingStep(index=5, key="platforms", field="platforms", title="Where will you share these images?",
                   subtitle="Select your primary platforms", options=PLATFORMS, multi_select=True),
    OnboardingStep(index=6, key="image-types", field="imageTypes", title="What types of images do you need?",
                   subtitle="Select all that apply", options=IMAGE_TYPES, multi_select=True),
    OnboardingStep(index=7, key="brand-style", field="brandStyle", title="Describe your brand style",
                   subtitle="Select 2-3 that best fit", options=BRAND_STYLES, multi_select=True),
    OnboardingStep(index=8, key="summary", title="You're all set!",
                   subtitle="Ready to create amazing content"),
]

SUMMARY_STEP = len(STEPS) - 1

LIST_FIELDS = ("useCases", "platforms", "imageTypes", "brandStyle", "brandColors", "goals")
TEXT_FIELDS = ("name", "email", "role", "industry", "niche", "frequency")


def empty_user_data() -> Dict[str, Any]:
    data: Dict[str, Any] = {field: "" for field in TEXT_FIELDS}
    data.update({field: [] for field in LIST_FIELDS})
    return data


class OnboardingWizard:

    def __init__(
        self,
        on_complete: Callable[[Dict[str, Any]], None],
        user_data: Optional[Dict[str, Any]] = None,
        edit_mode: bool = False,
    ):
        self.on_complete = on_complete
        self.user_data = empty_user_data()
        if user_data:
            self.user_data.update(user_data)
        self.edit_mode = edit_mode
        self.step = SUMMARY_STEP if edit_mode else 0
        self.finished = False

    @property
    def current(self) -> OnboardingStep:
        return STEPS[self.step]

    @property
    def is_last_step(self) -> bool:
        return self.step == SUMMARY_STEP

    def set_field(self, name: str, value: Any) -> None:
        if name not in self.user_data:
            raise KeyError(f"Unknown onboarding field: {name}")
        self.user_data[name] = value

    def toggle(self, name: str, option: str) -> List[str]:
        if name not in LIST_FIELDS:
            raise KeyError(f"{name} is not a multi-select field")
        selected = list(self.user_data[name])
        if option in selected:
            selected.remove(option)
        else:
            selected.append(option)
        self.user_data[name] = selected
        return selected

    def can_proceed(self) -> bool:
        field = self.current.field
        if field is None:
            return True
        value = self.user_data.get(field)
        if isinstance(value, str):
            return bool(value.strip())
        return bool(value)

    def next(self) -> bool:
        """Advance one step, completing on the summary. Returns False when refused."""
        if self.finished or not self.can_proceed():
            return False
        if self.is_last_step:
            self._complete(dict(self.user_data))
            return True
        self.step += 1
        return True

    def back(self) -> bool:
        if self.finished or self.step == 0:
            return False
        self.step -= 1
        return True

    def jump_to(self, step: int) -> None:
        if not self.edit_mode:
            raise RuntimeError("Jumping between steps is only available when editing a profile")
        if not 0 <= step < len(STEPS):
            raise IndexError(f"No onboarding step {step}")
        self.step = step

    def skip(self) -> None:
        if self.finished:
            return
        self._complete({**self.user_data, "skipped": True})

    def _complete(self, payload: Dict[str, Any]) -> None:
        self.finished = True
        logger.info("Onboarding finished at step %s (skipped=%s)", self.current.key, payload.get("skipped", False))
        self.on_complete(payload)
