from __future__ import annotations

from typing import Any, Dict, Optional

from .config import Settings, get_settings


def agent_card(settings: Optional[Settings] = None) -> Dict[str, Any]:
    s = settings or get_settings()
    base = s.public_url.rstrip("/")
    return {
        "protocolVersion": s.protocol_version,
        "name": s.agent_name,
        "description": s.agent_description,
        "version": s.agent_version,
        "preferredTransport": "JSONRPC",
        "url": f"{base}{s.rpc_path}",
        "capabilities": {"streaming": False, "pushNotifications": False, "stateTransitionHistory": False},
        "defaultInputModes": ["text/plain"],
        "defaultOutputModes": ["text/plain", "application/json"],
        "endpoints": {
            "rpc": f"{base}{s.rpc_path}",
            "agentCard": f"{base}/.well-known/agent.json",
            "health": f"{base}/health",
        },
        "skills": [
            {
                "id": "customer-profiling",
                "name": "Customer Profiling",
                "description": "Turns a business idea into a customer persona: demographics, "
                               "pain points, motivations, interests and preferred channels.",
                "tags": ["marketing", "persona", "customer-research"],
                "examples": ["A sustainable fashion e-commerce platform targeting eco-conscious millennials"],
            }
        ],
    }
