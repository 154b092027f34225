"""
JSON-RPC dispatch for the profiler task.

``Dispatcher.dispatch`` takes the raw request body and always returns a
response value: framing problems become JSON-RPC error objects, domain
problems become ``failed`` task results. Nothing here raises to the
transport.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Union

from pydantic import ValidationError

from .errors import ProfilerError
from .extractor import IdeaExtractor
from .models import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JSONRPCRequest,
    JSONRPCResponse,
    Message,
    MessageParams,
    ProfileResponse,
    RequestId,
    TaskId,
    TaskResult,
    rpc_error,
    rpc_success,
)
from .profiler import ProfileGenerator
from .results import MISSING_IDEA_TEXT, build_failure, build_success

log = logging.getLogger("profiler.dispatcher")

DIRECT_MESSAGE_ID = "direct-message"
DEFAULT_METHODS = ("agent/task", "message/send")
DEFAULT_TIMEOUT = 60.0


# =============================================================================
# Request shapes
# =============================================================================

@dataclass(frozen=True)
class EnvelopeRequest:
    envelope: JSONRPCRequest


@dataclass(frozen=True)
class BareMessageRequest:
    params: MessageParams
    id: str = DIRECT_MESSAGE_ID


Request = Union[EnvelopeRequest, BareMessageRequest]


def parse_request(raw: Union[bytes, str]) -> Optional[Request]:
    """
    Resolve the body as a JSON-RPC envelope, else as bare message params.
    Returns None when it is neither.
    """
    try:
        return EnvelopeRequest(JSONRPCRequest.model_validate_json(raw))
    except ValidationError as e:
        log.info("not a JSON-RPC envelope, trying direct message", extra={"error": e.errors(include_url=False)[:3]})
    try:
        return BareMessageRequest(MessageParams.model_validate_json(raw))
    except ValidationError as e:
        log.warning("request is neither envelope nor direct message", extra={"error": e.errors(include_url=False)[:3]})
    return None


# =============================================================================
# Dispatcher
# =============================================================================

TaskHandler = Callable[[RequestId, Any], Awaitable[JSONRPCResponse]]


class Dispatcher:
    def __init__(
        self,
        generator: ProfileGenerator,
        *,
        extractor: Optional[IdeaExtractor] = None,
        methods: Iterable[str] = DEFAULT_METHODS,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.generator = generator
        self.extractor = extractor or IdeaExtractor()
        self.timeout = timeout
        # Routing table is fixed at construction; every accepted method runs the profiling task.
        self.routes: Dict[str, TaskHandler] = {m: self._handle_task for m in methods}

    async def dispatch(self, raw: Union[bytes, str]) -> JSONRPCResponse:
        request = parse_request(raw)

        if request is None:
            return self._error(None, PARSE_ERROR, "Parse error")

        if isinstance(request, BareMessageRequest):
            log.info("handling direct message")
            result = await self.run_task(request.id, request.params.message)
            return rpc_success(request.id, result)

        rpc = request.envelope
        if rpc.jsonrpc != JSONRPC_VERSION:
            return self._error(rpc.id, INVALID_REQUEST, "Invalid JSON-RPC version")

        handler = self.routes.get(rpc.method)
        if handler is None:
            return self._error(rpc.id, METHOD_NOT_FOUND, f"Method not found: {rpc.method}")

        log.info("handling rpc task", extra={"rpc_id": rpc.id, "method": rpc.method})
        return await handler(rpc.id, rpc.params)

    async def dispatch_bytes(self, raw: Union[bytes, str]) -> bytes:
        response = await self.dispatch(raw)
        return json.dumps(response.to_wire(), ensure_ascii=False).encode("utf-8")

    async def _handle_task(self, request_id: RequestId, params: Any) -> JSONRPCResponse:
        try:
            msg_params = MessageParams.model_validate(params)
        except ValidationError as e:
            log.warning("invalid params", extra={"rpc_id": request_id, "error": e.errors(include_url=False)[:3]})
            return self._error(request_id, INVALID_PARAMS, "Invalid params")

        task_id = request_id if request_id is not None else DIRECT_MESSAGE_ID
        result = await self.run_task(task_id, msg_params.message)
        return rpc_success(request_id, result)

    async def run_task(self, task_id: TaskId, message: Message) -> TaskResult:
        """Extract the idea, generate, and wrap the outcome as a TaskResult."""
        idea = self.extractor.extract(message)
        if not idea:
            log.warning("no business idea in message", extra={"task_id": task_id})
            return build_failure(task_id, MISSING_IDEA_TEXT)

        log.info("generating profiles", extra={"task_id": task_id, "idea_len": len(idea)})
        try:
            profiles = await asyncio.wait_for(self._generate(idea), timeout=self.timeout)
        except asyncio.TimeoutError:
            log.error("profile generation timed out", extra={"task_id": task_id, "timeout": self.timeout})
            return build_failure(
                task_id,
                f"Failed to generate customer profiles: timed out after {self.timeout:g}s",
            )
        except ProfilerError as e:
            log.error("profile generation failed", extra={"task_id": task_id, "error": str(e)})
            return build_failure(task_id, f"Failed to generate customer profiles: {e}")
        except Exception as e:
            log.exception("profile generator raised", extra={"task_id": task_id})
            return build_failure(task_id, f"Failed to generate customer profiles: {e}")

        log.info("profile generation succeeded", extra={"task_id": task_id, "profiles": len(profiles.profiles)})
        return build_success(task_id, profiles)

    async def _generate(self, idea: str) -> ProfileResponse:
        gen = self.generator.generate_profile
        if inspect.iscoroutinefunction(gen):
            return await gen(idea)
        # Sync generators block on network I/O; keep them off the event loop.
        return await asyncio.to_thread(gen, idea)

    def _error(self, request_id: RequestId, code: int, message: str) -> JSONRPCResponse:
        log.warning("rpc error", extra={"rpc_id": request_id, "code": code, "error_message": message})
        return rpc_error(request_id, code, message)
