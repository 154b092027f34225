from __future__ import annotations
import time
import httpx
from typing import Dict, Any, Optional

from .errors import ProfilerError


class RPCError(ProfilerError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message


class A2AClient:
    def __init__(self, base_url: str, rpc_path: str = "/a2a/profiler", timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.rpc_path = rpc_path
        self.timeout = timeout

    def _payload(self, idea: str, use_jsonrpc: bool, method: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "message": {"kind": "message", "role": "user", "parts": [{"kind": "text", "text": idea}]},
            "configuration": {"blocking": True, "acceptedOutputModes": ["text", "data"]},
        }
        if not use_jsonrpc:
            return params
        return {"jsonrpc": "2.0", "id": f"cli-{int(time.time())}", "method": method, "params": params}

    def send(self, idea: str, use_jsonrpc: bool = True, method: str = "agent/task") -> Dict[str, Any]:
        """POST one profiling request; returns the decoded JSON-RPC response."""
        r = httpx.post(
            f"{self.base_url}{self.rpc_path}",
            json=self._payload(idea, use_jsonrpc, method),
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json()

    def ask(self, idea: str, use_jsonrpc: bool = True) -> str:
        """Return the agent's reply text; raises RPCError for protocol errors."""
        data = self.send(idea, use_jsonrpc=use_jsonrpc)
        err = data.get("error")
        if err:
            raise RPCError(int(err.get("code", 0)), str(err.get("message", "")))
        result = data.get("result") or {}
        message = (result.get("status") or {}).get("message") or {}
        for p in message.get("parts", []):
            if p.get("kind") == "text":
                return p.get("text", "")
        return ""

    def health(self) -> bool:
        r = httpx.get(f"{self.base_url}/health", timeout=self.timeout)
        return r.status_code == 200 and r.text == "OK"

    def card(self) -> Dict[str, Any]:
        r = httpx.get(f"{self.base_url}/.well-known/agent.json", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def task_state(self, response: Dict[str, Any]) -> Optional[str]:
        return ((response.get("result") or {}).get("status") or {}).get("state")
