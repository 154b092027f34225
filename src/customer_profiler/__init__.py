from __future__ import annotations

import importlib.metadata

try:
    # Dynamically pull version from installed package metadata
    __version__ = importlib.metadata.version("customer-profiler-agent")
except importlib.metadata.PackageNotFoundError:
    # Fallback when running from a source checkout
    __version__ = "0.0.0.dev0"

from .client import A2AClient
from .dispatcher import Dispatcher
from .extractor import IdeaExtractor, NoiseFilter, extract_idea
from .formatter import format_profile_response
from .results import build_failure, build_success

__all__ = [
    "A2AClient",
    "Dispatcher",
    "IdeaExtractor",
    "NoiseFilter",
    "extract_idea",
    "format_profile_response",
    "build_failure",
    "build_success",
    "__version__",
]
