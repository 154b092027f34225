"""Send one business idea to a running agent, as a platform integration would."""
import httpx, os, sys

BASE = os.getenv("PROFILER_BASE", "http://localhost:8080")


def call_profiler(idea: str) -> str:
    # Replay a short conversation the way chat platforms do: history as a data part,
    # oldest first, with the agent's own progress message last.
    history = [
        {"kind": "text", "text": f"<p>{idea}</p>"},
        {"kind": "text", "text": "Generating customer profile..."},
    ]
    payload = {
        "jsonrpc": "2.0",
        "id": "example-1",
        "method": "message/send",
        "params": {
            "message": {
                "kind": "message",
                "role": "user",
                "messageId": "example",
                "parts": [{"kind": "data", "data": history}],
            },
            "configuration": {"blocking": True},
        },
    }
    try:
        r = httpx.post(f"{BASE}/a2a/profiler", json=payload, timeout=60.0)
        r.raise_for_status()
    except httpx.ConnectError:
        return f"[Error] Could not connect to the agent at {BASE}. Did you run `customer-profiler serve`?"
    except httpx.HTTPStatusError as e:
        return f"[Error] Server returned {e.response.status_code}: {e.response.text}"

    data = r.json()
    if "error" in data:
        return f"[RPC error {data['error']['code']}] {data['error']['message']}"
    status = data["result"]["status"]
    for p in (status.get("message") or {}).get("parts", []):
        if p.get("kind") == "text":
            return f"[{status['state']}]\n{p.get('text', '')}"
    return "[No text part in response]"


if __name__ == "__main__":
    idea = " ".join(sys.argv[1:]) or "A sustainable fashion e-commerce platform targeting eco-conscious millennials"
    print(call_profiler(idea))
