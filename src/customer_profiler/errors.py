from __future__ import annotations


class ProfilerError(Exception):
    """Base class for errors raised inside the customer profiler."""


class ProviderError(ProfilerError):
    """A text provider could not produce a completion."""


class ProfileGenerationError(ProfilerError):
    """The persona could not be generated or parsed from the provider output."""


class HistoryDecodeError(ProfilerError):
    """A data part payload is not a decodable conversation history."""
