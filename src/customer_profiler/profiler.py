"""
Customer-persona generation on top of a text provider.

The provider is asked for one persona on a single line of ``key: value``
pairs; the line is parsed back into a CustomerProfile.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from .errors import ProfileGenerationError, ProviderError
from .models import CustomerProfile, ProfileResponse
from .providers import ProviderBase, build_provider

log = logging.getLogger("profiler.generator")

PROFILE_KEYS = (
    "age",
    "gender",
    "location",
    "occupation",
    "income",
    "pain_points",
    "motivations",
    "interests",
    "channel",
)

_KEY_RE = re.compile(r"(?:^|,)\s*(" + "|".join(PROFILE_KEYS) + r")\s*:\s*", re.IGNORECASE)

PROMPT_TEMPLATE = """You are an expert market researcher. Based ONLY on the business idea "{idea}", generate a SINGLE, concise customer profile.

The output MUST be a single line of text in the format "key: value, key: value, ..." without any other text, markdown, or punctuation. Use only the following keys in this order:

age: Age range (e.g., 30-50)
gender: Gender (e.g., female)
location: Geographic type (e.g., Urban)
occupation: Job title/occupation (e.g., Marketing Manager)
income: Income range (e.g., $75k-100k)
pain_points: 1-2 main pain points (comma-separated, no quotes)
motivations: 1-2 key motivations (comma-separated, no quotes)
interests: 2-3 interests/hobbies (comma-separated, no quotes)
channel: 1 preferred channel (e.g., Instagram)

Example format: age: 30-50, gender: female, location: Urban, occupation: Marketing Manager, income: $75k-100k, pain_points: lack of time, overwhelming choices, motivations: convenience, quality, interests: makeup, shoes, travel, channel: Instagram"""


def build_prompt(idea: str) -> str:
    return PROMPT_TEMPLATE.format(idea=idea)


def _split_list(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def parse_simple_profile(text: str) -> CustomerProfile:
    """
    Parse ``age: 30-50, gender: female, ..., channel: Instagram``.

    Keys are recognised by name, so list values may themselves contain
    commas. Unknown text between keys is ignored.
    """
    text = (text or "").strip()
    pieces = _KEY_RE.split(text)
    # re.split yields [prefix, key1, value1, key2, value2, ...]
    data: Dict[str, str] = {}
    for key, value in zip(pieces[1::2], pieces[2::2]):
        data[key.lower()] = value.strip().rstrip(",").strip()

    if not data:
        raise ProfileGenerationError(f"no 'key: value' pairs in model output: {text[:120]!r}")

    return CustomerProfile(
        age=data.get("age", ""),
        gender=data.get("gender", ""),
        location=data.get("location", ""),
        occupation=data.get("occupation", ""),
        income=data.get("income", ""),
        pain_points=_split_list(data.get("pain_points", "")),
        motivations=_split_list(data.get("motivations", "")),
        interests=_split_list(data.get("interests", "")),
        preferred_channels=_split_list(data.get("channel", "")),
    )


class ProfileGenerator:
    """Generation capability consumed by the dispatcher."""

    def generate_profile(self, idea: str) -> ProfileResponse:  # pragma: no cover - interface
        raise NotImplementedError

    @property
    def ready(self) -> bool:
        return True

    @property
    def reason(self) -> str:
        return ""


class LLMProfileGenerator(ProfileGenerator):
    def __init__(self, provider: ProviderBase) -> None:
        self.provider = provider

    @property
    def ready(self) -> bool:
        return bool(getattr(self.provider, "ready", False))

    @property
    def reason(self) -> str:
        return getattr(self.provider, "reason", "")

    def generate_profile(self, idea: str) -> ProfileResponse:
        try:
            raw = self.provider.generate(build_prompt(idea))
        except ProviderError as e:
            raise ProfileGenerationError(str(e)) from e

        log.debug("provider output", extra={"provider": self.provider.id, "chars": len(raw)})
        try:
            profile = parse_simple_profile(raw)
        except ProfileGenerationError as e:
            raise ProfileGenerationError(f"failed to parse simple profile: {e}") from e

        return ProfileResponse(business_idea=idea, profiles=[profile])


def build_generator(provider: Optional[ProviderBase] = None) -> LLMProfileGenerator:
    return LLMProfileGenerator(provider or build_provider())
