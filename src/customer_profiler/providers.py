from __future__ import annotations
import importlib
import pkgutil
import inspect
import logging
from typing import Callable, Dict, Optional

from importlib.metadata import entry_points

from .config import Settings, get_settings
from .errors import ProviderError

log = logging.getLogger("profiler.providers")


# ===== Base contract =====
class ProviderBase:
    """
    Base text-provider contract. Implementations should override:
      - id (short identifier, e.g. 'gemini', 'static')
      - name (human-friendly)
      - ready (bool)
      - reason (why not ready)
      - generate(prompt) -> str

    generate() raises ProviderError when no completion can be produced.
    """
    id: str = "base"
    name: str = "BaseProvider"
    ready: bool = False
    reason: str = "Not initialized"

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    def generate(self, prompt: str) -> str:
        raise NotImplementedError


class NotReadyProvider(ProviderBase):
    """Stand-in returned when a plugin fails to load or init."""
    def __init__(self, provider_id: str, reason: str) -> None:
        self.id = provider_id
        self.name = provider_id.capitalize()
        self.ready = False
        self.reason = reason

    def generate(self, prompt: str) -> str:
        raise ProviderError(f"provider '{self.id}' not ready: {self.reason}")


# ===== Plugin discovery =====
PLUGIN_PACKAGE = "customer_profiler.provider_plugins"
ENTRY_POINT_GROUP = "customer_profiler.providers"
Factory = Callable[[Settings], ProviderBase]


def _safe_factory_from_module(module_name: str, fallback_id: str) -> Factory:
    """
    Build a factory for a provider module. If import fails or the module
    does not expose a usable Provider class, the factory makes a NotReadyProvider.
    """
    try:
        mod = importlib.import_module(module_name)
    except Exception as e:
        def _err(settings: Settings) -> ProviderBase:
            return NotReadyProvider(fallback_id, reason=f"Import error: {e}")
        return _err

    cls = getattr(mod, "Provider", None)
    if inspect.isclass(cls) and issubclass(cls, ProviderBase):
        def _ok_cls(settings: Settings) -> ProviderBase:
            try:
                return cls(settings)
            except Exception as e:
                return NotReadyProvider(fallback_id, reason=f"Provider() init failed: {e}")
        return _ok_cls

    def _stub(settings: Settings) -> ProviderBase:
        return NotReadyProvider(fallback_id, reason="Module did not expose a Provider class.")
    return _stub


def _discover_builtin() -> Dict[str, Factory]:
    registry: Dict[str, Factory] = {}
    pkg = importlib.import_module(PLUGIN_PACKAGE)
    prefix = pkg.__name__ + "."
    for _, name, ispkg in pkgutil.iter_modules(pkg.__path__, prefix):
        if ispkg:
            continue
        short = name.rsplit(".", 1)[-1]
        registry[short] = _safe_factory_from_module(name, short)
    return registry


def _discover_entry_points() -> Dict[str, Factory]:
    registry: Dict[str, Factory] = {}
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        pid = ep.name
        def _factory(settings: Settings, ep=ep, pid=pid) -> ProviderBase:
            try:
                obj = ep.load()
                if inspect.isclass(obj) and issubclass(obj, ProviderBase):
                    return obj(settings)
                return NotReadyProvider(pid, reason="entry point is not a ProviderBase subclass")
            except Exception as e:
                return NotReadyProvider(pid, reason=f"entry point load error: {e}")
        registry[pid] = _factory
    return registry


_REGISTRY: Dict[str, Factory] = {}
_REGISTRY.update(_discover_builtin())
_REGISTRY.update(_discover_entry_points())

# Aliases allow friendly names (e.g., "google" -> "gemini")
_ALIASES: Dict[str, str] = {
    "gemini": "gemini",
    "google": "gemini",
    "static": "static",
    "offline": "static",
    "mock": "static",
}


def list_providers() -> Dict[str, str]:
    """Returns {provider_id: 'builtin'|'entrypoint'}."""
    out: Dict[str, str] = {k: "builtin" for k in _discover_builtin()}
    out.update({k: "entrypoint" for k in _discover_entry_points()})
    return out


def build_provider(settings: Optional[Settings] = None) -> ProviderBase:
    """
    Build the provider selected by LLM_PROVIDER.
    Unknown ids yield a NotReadyProvider so the agent still starts and
    reports the problem through /readyz and failed tasks.
    """
    settings = settings or get_settings()
    want = (settings.llm_provider or "gemini").lower().strip()
    want = _ALIASES.get(want, want)

    factory = _REGISTRY.get(want)
    if factory is None:
        log.warning("unknown provider", extra={"provider": want, "known": sorted(_REGISTRY)})
        return NotReadyProvider(want, reason=f"Unknown provider '{want}'")
    provider = factory(settings)
    log.info("provider built", extra={"provider": provider.id, "ready": provider.ready, "reason": provider.reason})
    return provider
