# src/customer_profiler/config.py
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any, List, Optional
from pydantic import Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
import json


def _parse_bool(value: Any) -> bool:
    """
    Robust bool parser:
    - handles actual bools
    - strips inline comments like 'false   # note'
    - accepts common truthy/falsey tokens
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        v = value.split("#", 1)[0].strip().lower()
        if v in {"1", "true", "yes", "y", "on"}:
            return True
        if v in {"0", "false", "no", "n", "off", ""}:
            return False
    return bool(value)


def _parse_list(value: Any) -> List[str]:
    """
    Accept:
      - native list (already parsed)
      - JSON list string: '["generating","creating"]'
      - CSV string: 'generating,creating'
    Returns a list of trimmed strings; empty -> []
    """
    if isinstance(value, (list, tuple)):
        return [str(x).strip() for x in value]
    if isinstance(value, str):
        raw = value.split("#", 1)[0].strip()
        if not raw:
            return []
        if raw.startswith("[") and raw.endswith("]"):
            try:
                data = json.loads(raw)
            except ValueError:
                data = None
            if isinstance(data, list):
                return [str(x).strip() for x in data]
        return [s.strip() for s in raw.split(",") if s.strip()]
    return [str(value).strip()]


# Env values stay raw strings so _parse_list can accept CSV as well as JSON.
StrList = Annotated[List[str], NoDecode]


class Settings(BaseSettings):
    """
    Agent settings from environment variables and an optional .env file.
    Field names are lowercase; UPPERCASE env names work through aliases.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ------------------------------------------------------------------
    # Identity & protocol
    # ------------------------------------------------------------------
    agent_name: str = Field(
        default="Customer Profiler Agent",
        validation_alias=AliasChoices("AGENT_NAME", "agent_name"),
    )
    agent_description: str = Field(
        default="Generates a customer persona from a short business idea.",
        validation_alias=AliasChoices("AGENT_DESCRIPTION", "agent_description"),
    )
    agent_version: str = Field(
        default="1.0.0",
        validation_alias=AliasChoices("AGENT_VERSION", "agent_version"),
    )
    protocol_version: str = Field(
        default="0.3.0",
        validation_alias=AliasChoices("PROTOCOL_VERSION", "protocol_version"),
    )

    # ------------------------------------------------------------------
    # Network / URLs
    # ------------------------------------------------------------------
    host: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("HOST", "host"),
    )
    port: int = Field(
        default=8080,
        validation_alias=AliasChoices("PORT", "port"),
    )
    # Keep this as str to avoid strict URL validation breaking on 'http://localhost'
    public_url: str = Field(
        default="http://localhost:8080",
        validation_alias=AliasChoices("PUBLIC_URL", "public_url"),
    )
    rpc_path: str = Field(
        default="/a2a/profiler",
        validation_alias=AliasChoices("RPC_PATH", "rpc_path"),
    )

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    llm_provider: str = Field(
        default="gemini",
        validation_alias=AliasChoices("LLM_PROVIDER", "llm_provider"),
    )
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "gemini_api_key"),
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash-lite",
        validation_alias=AliasChoices("GEMINI_MODEL", "gemini_model"),
    )
    gemini_temperature: float = Field(
        default=0.7,
        validation_alias=AliasChoices("GEMINI_TEMPERATURE", "gemini_temperature"),
    )
    gemini_top_p: float = Field(
        default=0.95,
        validation_alias=AliasChoices("GEMINI_TOP_P", "gemini_top_p"),
    )
    gemini_max_output_tokens: int = Field(
        default=2048,
        validation_alias=AliasChoices("GEMINI_MAX_OUTPUT_TOKENS", "gemini_max_output_tokens"),
    )
    generation_timeout: float = Field(
        default=60.0,
        gt=0,
        validation_alias=AliasChoices("GENERATION_TIMEOUT", "generation_timeout"),
    )

    # ------------------------------------------------------------------
    # Dispatch & extraction
    # ------------------------------------------------------------------
    accepted_methods: StrList = Field(
        default_factory=lambda: ["agent/task", "message/send"],
        validation_alias=AliasChoices("ACCEPTED_METHODS", "accepted_methods"),
    )
    noise_substrings: StrList = Field(
        default_factory=lambda: ["generating", "creating"],
        validation_alias=AliasChoices("NOISE_SUBSTRINGS", "noise_substrings"),
    )
    noise_exact: StrList = Field(
        default_factory=lambda: [".", "..", "...", "ce..."],
        validation_alias=AliasChoices("NOISE_EXACT", "noise_exact"),
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
    )
    log_bodies: bool = Field(
        default=False,
        validation_alias=AliasChoices("LOG_BODIES", "log_bodies"),
    )

    # ------------------------------------------------------------------
    # CORS (strings or lists; '*' means allow all)
    # ------------------------------------------------------------------
    cors_allow_origins: StrList = Field(
        default_factory=lambda: ["*"],
        validation_alias=AliasChoices("CORS_ALLOW_ORIGINS", "cors_allow_origins"),
    )
    cors_allow_methods: StrList = Field(
        default_factory=lambda: ["*"],
        validation_alias=AliasChoices("CORS_ALLOW_METHODS", "cors_allow_methods"),
    )
    cors_allow_headers: StrList = Field(
        default_factory=lambda: ["*"],
        validation_alias=AliasChoices("CORS_ALLOW_HEADERS", "cors_allow_headers"),
    )

    # -------------------------
    # Validators (robust input)
    # -------------------------
    @field_validator(
        "accepted_methods",
        "noise_substrings",
        "noise_exact",
        "cors_allow_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        mode="before",
    )
    @classmethod
    def _val_lists(cls, v: Any) -> List[str]:
        return _parse_list(v)

    @field_validator("log_bodies", mode="before")
    @classmethod
    def _val_bools(cls, v: Any) -> bool:
        return _parse_bool(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def _val_level(cls, v: Any) -> str:
        return str(v).split("#", 1)[0].strip().upper() or "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings()
