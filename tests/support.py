import asyncio
import json

from customer_profiler.errors import ProfileGenerationError
from customer_profiler.models import CustomerProfile, ProfileResponse
from customer_profiler.profiler import ProfileGenerator


class StubGenerator(ProfileGenerator):
    """Returns one fixed persona and records every idea it was asked about."""

    def __init__(self, profiles=None):
        self.calls = []
        self.profiles = profiles if profiles is not None else [
            CustomerProfile(
                age="25-35",
                gender="female",
                location="Urban",
                occupation="Designer",
                income="$50k-80k",
                pain_points=["limited time"],
                motivations=["sustainability"],
                interests=["fashion", "travel"],
                preferred_channels=["Instagram"],
            )
        ]

    def generate_profile(self, idea):
        self.calls.append(idea)
        return ProfileResponse(business_idea=idea, profiles=list(self.profiles))


class FailingGenerator(ProfileGenerator):
    def generate_profile(self, idea):
        raise ProfileGenerationError("quota exceeded")


def run(coro):
    return asyncio.run(coro)


def rpc(method="message/send", id="req-1", text="A pet care app", jsonrpc="2.0", **extra):
    body = {
        "jsonrpc": jsonrpc,
        "id": id,
        "method": method,
        "params": {
            "message": {"kind": "message", "role": "user", "parts": [{"kind": "text", "text": text}]},
            "configuration": {"blocking": True},
        },
    }
    body.update(extra)
    return json.dumps(body).encode()
