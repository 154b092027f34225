import asyncio
import json
import time

import pytest

from customer_profiler.dispatcher import (
    DIRECT_MESSAGE_ID,
    BareMessageRequest,
    Dispatcher,
    EnvelopeRequest,
    parse_request,
)
from customer_profiler.profiler import ProfileGenerator

from .support import FailingGenerator, StubGenerator, rpc, run


def test_parse_request_prefers_envelope():
    assert isinstance(parse_request(rpc()), EnvelopeRequest)


def test_parse_request_falls_back_to_bare_message():
    req = parse_request(json.dumps({"message": {"role": "user", "parts": []}}))
    assert isinstance(req, BareMessageRequest)
    assert req.id == DIRECT_MESSAGE_ID


def test_parse_request_gives_up():
    assert parse_request(b"not json") is None
    assert parse_request(b"[1, 2, 3]") is None


def test_completed_task(dispatcher, generator):
    resp = run(dispatcher.dispatch(rpc(text="A sustainable fashion e-commerce platform")))
    assert resp.error is None
    assert resp.id == "req-1"
    assert resp.result.id == "req-1"
    assert resp.result.status.state == "completed"
    assert generator.calls == ["A sustainable fashion e-commerce platform"]


@pytest.mark.parametrize("method", ["agent/task", "message/send"])
def test_both_methods_route_to_task(dispatcher, method):
    resp = run(dispatcher.dispatch(rpc(method=method)))
    assert resp.result.status.state == "completed"


@pytest.mark.parametrize("rid", ["abc", 42, "x-1", 1.5, True, False, 0])
def test_unknown_method_echoes_id(dispatcher, generator, rid):
    resp = run(dispatcher.dispatch(rpc(method="tasks/cancel", id=rid)))
    assert resp.result is None
    assert resp.error.code == -32601
    assert resp.id == rid
    assert type(resp.id) is type(rid)
    assert generator.calls == []


def test_envelope_without_method_echoes_id(dispatcher, generator):
    body = json.dumps({"jsonrpc": "2.0", "id": "keep-me", "params": {}})
    resp = run(dispatcher.dispatch(body))
    assert resp.error.code == -32601
    assert resp.id == "keep-me"
    assert isinstance(parse_request(body), EnvelopeRequest)
    assert generator.calls == []


def test_float_id_echoed_on_wire(dispatcher):
    out = json.loads(run(dispatcher.dispatch_bytes(rpc(method="nope", id=1.5))))
    assert out["id"] == 1.5
    out = json.loads(run(dispatcher.dispatch_bytes(rpc(method="nope", id=True))))
    assert out["id"] is True


@pytest.mark.parametrize("version", ["1.0", "2", ""])
def test_wrong_version_echoes_id(dispatcher, version):
    resp = run(dispatcher.dispatch(rpc(jsonrpc=version, id="v-1")))
    assert resp.error.code == -32600
    assert resp.id == "v-1"


def test_missing_version_is_invalid_request(dispatcher):
    body = json.dumps({"id": "m-1", "method": "message/send", "params": {}})
    resp = run(dispatcher.dispatch(body))
    assert resp.error.code == -32600
    assert resp.id == "m-1"


def test_parse_error(dispatcher):
    resp = run(dispatcher.dispatch(b"{broken"))
    assert resp.error.code == -32700
    assert resp.id is None


@pytest.mark.parametrize("params", [None, {}, {"message": "hello"}, {"message": {"parts": "nope"}}])
def test_invalid_params(dispatcher, params):
    body = json.dumps({"jsonrpc": "2.0", "id": "p-1", "method": "message/send", "params": params})
    resp = run(dispatcher.dispatch(body))
    assert resp.error.code == -32602
    assert resp.id == "p-1"


def test_direct_message_fallback(dispatcher, generator):
    body = json.dumps({
        "message": {"kind": "message", "role": "user", "parts": [{"kind": "text", "text": "A pet care app"}]},
        "configuration": {"blocking": True},
    })
    resp = run(dispatcher.dispatch(body))
    assert resp.id == DIRECT_MESSAGE_ID
    assert resp.result.id == DIRECT_MESSAGE_ID
    assert resp.result.status.state == "completed"
    assert generator.calls == ["A pet care app"]


def test_missing_idea_is_soft_failure(dispatcher, generator):
    body = json.dumps({
        "jsonrpc": "2.0", "id": "e-1", "method": "message/send",
        "params": {"message": {"kind": "message", "role": "user", "parts": []}},
    })
    resp = run(dispatcher.dispatch(body))
    assert resp.error is None
    assert resp.result.id == "e-1"
    assert resp.result.status.state == "failed"
    assert "business idea" in resp.result.status.message.parts[0].text
    assert generator.calls == []


def test_history_payload_reaches_generator(dispatcher, generator):
    body = json.dumps({
        "jsonrpc": "2.0", "id": "h-1", "method": "message/send",
        "params": {"message": {"role": "user", "parts": [
            {"kind": "data", "data": [
                {"kind": "text", "text": "<p>A pet care app</p>"},
                {"kind": "text", "text": "Generating profile..."},
            ]},
        ]}},
    })
    run(dispatcher.dispatch(body))
    assert generator.calls == ["A pet care app"]


def test_generation_failure_is_failed_task():
    d = Dispatcher(FailingGenerator())
    resp = run(d.dispatch(rpc(id="f-1")))
    assert resp.error is None
    assert resp.result.status.state == "failed"
    assert resp.result.status.message.parts[0].text == "Failed to generate customer profiles: quota exceeded"


def test_unexpected_generator_exception_is_failed_task():
    class Broken(ProfileGenerator):
        def generate_profile(self, idea):
            raise RuntimeError("socket closed")

    resp = run(Dispatcher(Broken()).dispatch(rpc()))
    assert resp.result.status.state == "failed"
    assert "socket closed" in resp.result.status.message.parts[0].text


def test_generation_timeout_is_failed_task():
    class Slow(ProfileGenerator):
        async def generate_profile(self, idea):
            await asyncio.sleep(5)

    started = time.monotonic()
    resp = run(Dispatcher(Slow(), timeout=0.05).dispatch(rpc(id="t-1")))
    assert time.monotonic() - started < 2
    assert resp.result.status.state == "failed"
    assert "timed out" in resp.result.status.message.parts[0].text


def test_async_generator_is_awaited():
    class Async(StubGenerator):
        async def generate_profile(self, idea):
            return StubGenerator.generate_profile(self, idea)

    gen = Async()
    resp = run(Dispatcher(gen).dispatch(rpc()))
    assert resp.result.status.state == "completed"
    assert gen.calls == ["A pet care app"]


def test_custom_routing_table(generator):
    d = Dispatcher(generator, methods=["tasks/send"])
    assert run(d.dispatch(rpc(method="tasks/send"))).result.status.state == "completed"
    assert run(d.dispatch(rpc(method="message/send"))).error.code == -32601


def test_integer_id_echoed_in_task(dispatcher):
    resp = run(dispatcher.dispatch(rpc(id=5)))
    assert resp.id == 5
    assert resp.result.id == 5


def test_null_id_uses_synthetic_task_id(dispatcher):
    resp = run(dispatcher.dispatch(rpc(id=None)))
    assert resp.id is None
    assert resp.result.id == DIRECT_MESSAGE_ID


def test_dispatch_bytes_serializes_wire_form(dispatcher):
    out = json.loads(run(dispatcher.dispatch_bytes(rpc(method="nope", id="b-1"))))
    assert out == {"jsonrpc": "2.0", "id": "b-1", "error": {"code": -32601, "message": "Method not found: nope"}}

    out = json.loads(run(dispatcher.dispatch_bytes(rpc(id="b-2"))))
    assert set(out) == {"jsonrpc", "id", "result"}
    assert out["result"]["status"]["state"] == "completed"


def test_cancelled_dispatch_propagates_instead_of_failing():
    async def scenario():
        started = asyncio.Event()

        class Hanging(ProfileGenerator):
            async def generate_profile(self, idea):
                started.set()
                await asyncio.sleep(5)

        task = asyncio.create_task(Dispatcher(Hanging(), timeout=10).dispatch(rpc(id="c-1")))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return task.cancelled()

    assert run(scenario()) is True
