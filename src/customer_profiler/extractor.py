"""
Recover the user's business idea from an inbound A2A message.

Messages arrive in two shapes:

- direct API use: one fresh ``text`` part holding the idea;
- platform integrations: a ``data`` part replaying the whole conversation as
  a list of message-like records, oldest first, interleaved with the agent's
  own progress chatter.

Both shapes must yield the same idea string.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .errors import HistoryDecodeError
from .models import DataPart, HistoryRecord, Message, TextPart

log = logging.getLogger("profiler.extractor")

DEFAULT_NOISE_SUBSTRINGS: Tuple[str, ...] = ("generating", "creating")
DEFAULT_NOISE_EXACT: Tuple[str, ...] = (".", "..", "...", "ce...")


@dataclass(frozen=True)
class NoiseFilter:
    """Rejects agent-emitted progress messages and truncated ellipsis artifacts."""

    substrings: Tuple[str, ...] = DEFAULT_NOISE_SUBSTRINGS
    exact: Tuple[str, ...] = DEFAULT_NOISE_EXACT

    @classmethod
    def from_lists(cls, substrings: Iterable[str], exact: Iterable[str]) -> "NoiseFilter":
        return cls(substrings=tuple(s.lower() for s in substrings if s), exact=tuple(exact))

    def is_noise(self, text: str) -> bool:
        if text in self.exact:
            return True
        low = text.lower()
        return any(s.lower() in low for s in self.substrings if s)


def clean_history_text(text: str) -> str:
    """Trim and drop paragraph markup added by chat front-ends."""
    cleaned = text.strip()
    cleaned = cleaned.replace("<p>", "").replace("</p>", "")
    return cleaned.strip()


class IdeaExtractor:
    def __init__(self, noise_filter: Optional[NoiseFilter] = None) -> None:
        self.noise_filter = noise_filter or NoiseFilter()

    def extract(self, message: Message) -> str:
        """Return the best-guess idea, or "" when nothing usable is present."""
        texts: List[str] = []

        for part in message.parts:
            if isinstance(part, TextPart):
                if part.text:
                    texts.append(part.text)
            elif isinstance(part, DataPart):
                try:
                    records = part.history()
                except HistoryDecodeError as e:
                    log.warning("skipping undecodable data part", extra={"error": str(e)})
                    continue
                latest = self._latest_request(records)
                if latest:
                    texts.append(latest)

        idea = " ".join(texts).strip()
        log.debug("extracted business idea", extra={"idea": idea})
        return idea

    def _latest_request(self, records: List[HistoryRecord]) -> str:
        # Histories are oldest-first; the caller's latest turn wins.
        for record in reversed(records):
            if record.get("kind") != "text":
                continue
            text = record.get("text")
            if not isinstance(text, str) or not text:
                continue
            cleaned = clean_history_text(text)
            if not cleaned or self.noise_filter.is_noise(cleaned):
                continue
            return cleaned
        return ""


_DEFAULT = IdeaExtractor()


def extract_idea(message: Message) -> str:
    return _DEFAULT.extract(message)
