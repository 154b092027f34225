from __future__ import annotations

import json
import uuid
from typing import Annotated, Any, Dict, List, Optional, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    Tag,
    field_validator,
    model_validator,
)

from .errors import HistoryDecodeError

JSONRPC_VERSION = "2.0"

# Reserved JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

# Task states
STATE_WORKING = "working"
STATE_INPUT_REQUIRED = "input-required"
STATE_COMPLETED = "completed"
STATE_FAILED = "failed"

TaskState = Literal["working", "input-required", "completed", "failed"]

# Message roles
ROLE_USER = "user"
ROLE_AGENT = "agent"

HistoryRecord = Dict[str, Any]


# =============================================================================
# Parts
# =============================================================================

class _PartBase(BaseModel):
    @model_validator(mode="before")
    @classmethod
    def _lift_type_to_kind(cls, v: Any) -> Any:
        # Older clients tag parts with "type" instead of "kind".
        if isinstance(v, dict) and "kind" not in v and "type" in v:
            v = dict(v)
            v["kind"] = v.pop("type")
        return v


class TextPart(_PartBase):
    kind: Literal["text"] = "text"
    text: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def _only_strings(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None


class DataPart(_PartBase):
    kind: Literal["data"] = "data"
    data: Any = None

    def history(self) -> List[HistoryRecord]:
        """Decode the payload into conversation-history records."""
        return decode_history(self.data)


class OtherPart(_PartBase):
    """Any part kind this agent does not interpret (files, etc.)."""

    model_config = ConfigDict(extra="allow")

    kind: str = "unknown"


def _part_tag(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("kind", value.get("type"))
    else:
        kind = getattr(value, "kind", None)
    return kind if kind in ("text", "data") else "other"


Part = Annotated[
    Union[
        Annotated[TextPart, Tag("text")],
        Annotated[DataPart, Tag("data")],
        Annotated[OtherPart, Tag("other")],
    ],
    Discriminator(_part_tag),
]


def decode_history(payload: Any) -> List[HistoryRecord]:
    """
    Normalize a data-part payload into a list of record mappings.

    Accepts an already structured list, a JSON string, or raw bytes holding
    the same. ``None`` yields no records; anything else raises
    HistoryDecodeError.
    """
    if payload is None:
        return []
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as e:
            raise HistoryDecodeError(f"data payload is not UTF-8: {e}") from e
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise HistoryDecodeError(f"data payload is not JSON: {e}") from e
    if not isinstance(payload, list):
        raise HistoryDecodeError(f"expected a list of records, got {type(payload).__name__}")
    for item in payload:
        if not isinstance(item, dict):
            raise HistoryDecodeError(f"history record is {type(item).__name__}, not an object")
    return payload


# =============================================================================
# Messages & request params
# =============================================================================

class Message(BaseModel):
    kind: str = "message"
    role: str = ROLE_USER
    parts: List[Part] = Field(default_factory=list)
    messageId: Optional[str] = None
    taskId: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class MessageConfiguration(BaseModel):
    acceptedOutputModes: List[str] = Field(default_factory=list)
    historyLength: Optional[int] = None
    blocking: Optional[bool] = None


class MessageParams(BaseModel):
    message: Message
    configuration: Optional[MessageConfiguration] = None


def make_agent_message(text: str, task_id: Optional[str] = None) -> Message:
    return Message(
        role=ROLE_AGENT,
        messageId=str(uuid.uuid4()),
        taskId=task_id,
        parts=[TextPart(text=text)],
    )


# =============================================================================
# Task results
# =============================================================================

class TaskStatus(BaseModel):
    state: TaskState
    timestamp: str
    message: Optional[Message] = None


class Artifact(BaseModel):
    artifactId: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    parts: List[Part] = Field(default_factory=list)


# Ids are opaque JSON scalars and are echoed back exactly as received.
TaskId = Union[StrictBool, StrictInt, StrictFloat, StrictStr]


class TaskResult(BaseModel):
    id: TaskId
    contextId: Optional[str] = None
    kind: Literal["task"] = "task"
    status: TaskStatus
    artifacts: List[Artifact] = Field(default_factory=list)
    history: List[Message] = Field(default_factory=list)


# =============================================================================
# JSON-RPC 2.0
# =============================================================================

RequestId = Optional[TaskId]

ENVELOPE_KEYS = ("jsonrpc", "id", "method")


class JSONRPCRequest(BaseModel):
    jsonrpc: Optional[str] = None
    id: RequestId = None
    method: str = ""
    params: Any = None

    @model_validator(mode="before")
    @classmethod
    def _require_envelope_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and not any(k in data for k in ENVELOPE_KEYS):
            raise ValueError("no jsonrpc, id or method member")
        return data


class JSONRPCErrorObj(BaseModel):
    code: int
    message: str


class JSONRPCResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId = None
    result: Optional[TaskResult] = None
    error: Optional[JSONRPCErrorObj] = None

    def to_wire(self) -> Dict[str, Any]:
        """Wire form: ``id`` always present, exactly one of result/error."""
        out: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            out["error"] = self.error.model_dump()
        else:
            out["result"] = self.result.model_dump(mode="json", exclude_none=True) if self.result else None
        return out


def rpc_error(request_id: RequestId, code: int, message: str) -> JSONRPCResponse:
    return JSONRPCResponse(id=request_id, error=JSONRPCErrorObj(code=code, message=message))


def rpc_success(request_id: RequestId, result: TaskResult) -> JSONRPCResponse:
    return JSONRPCResponse(id=request_id, result=result)


# =============================================================================
# Profile content
# =============================================================================

class CustomerProfile(BaseModel):
    age: str = ""
    gender: str = ""
    location: str = ""
    occupation: str = ""
    income: str = ""
    motivations: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    pain_points: List[str] = Field(default_factory=list)
    buying_behaviors: List[str] = Field(default_factory=list)
    preferred_channels: List[str] = Field(default_factory=list)


class ProfileResponse(BaseModel):
    business_idea: str
    profiles: List[CustomerProfile] = Field(default_factory=list)
    summary: str = ""
    keywords: List[str] = Field(default_factory=list)
