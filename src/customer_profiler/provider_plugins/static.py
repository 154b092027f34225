from __future__ import annotations

from ..providers import ProviderBase

CANNED_PROFILE = (
    "age: 25-40, gender: female, location: Urban, occupation: Product Designer, "
    "income: $60k-90k, pain_points: limited time, unclear product quality, "
    "motivations: convenience, sustainability, interests: design, travel, fitness, "
    "channel: Instagram"
)


class Provider(ProviderBase):
    """Offline provider answering every prompt with one fixed persona line."""

    id = "static"
    name = "Static"
    ready = True
    reason = "Static provider is always ready."

    def generate(self, prompt: str) -> str:
        return CANNED_PROFILE
