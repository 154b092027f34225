from __future__ import annotations

from typing import List

from .models import CustomerProfile, ProfileResponse

NO_PROFILES_TEXT = "No customer profiles generated."


def _section(lines: List[str], title: str, items: List[str]) -> None:
    bullets = [i.strip() for i in items if i and i.strip()]
    if not bullets:
        return
    lines.append("")
    lines.append(f"**{title}:**")
    lines.extend(f"- {b}" for b in bullets)


def _format_profile(profile: CustomerProfile) -> List[str]:
    lines = [
        "**Demographics:**",
        f"- Age: {profile.age}",
        f"- Gender: {profile.gender}",
        f"- Location: {profile.location}",
        f"- Occupation: {profile.occupation}",
        f"- Income: {profile.income}",
    ]
    _section(lines, "Pain Points", profile.pain_points)
    _section(lines, "Motivations", profile.motivations)
    _section(lines, "Interests", profile.interests)
    _section(lines, "Preferred Channels", profile.preferred_channels)
    return lines


def format_profile_response(resp: ProfileResponse) -> str:
    """Render generated personas as markdown for the agent's reply message."""
    if not resp.profiles:
        return NO_PROFILES_TEXT

    out = f"# Customer Profile for: {resp.business_idea}\n\n"
    blocks = ["\n".join(_format_profile(p)) + "\n" for p in resp.profiles]
    return out + "\n---\n\n".join(blocks)
