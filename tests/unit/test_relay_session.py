"""Unit tests for the relay session with fake sockets and a stub dispatcher."""

import json

import pytest
import websockets

from voicebank.realtime.session import RelaySession, RelayState, upstream_headers

AUDIO_DELTA = json.dumps({"type": "response.audio.delta", "delta": "UklGRg=="})
RESPONSE_DONE = json.dumps({"type": "response.done"})


def tool_call(call_id="call_1", name="get_balance", arguments='{"accountType": "Checking"}'):
    event = {"type": "response.function_call_arguments.done", "name": name, "arguments": arguments}
    if call_id is not None:
        event["call_id"] = call_id
    return json.dumps(event)


class StubDispatcher:
    """Records calls and answers with a fixed result."""

    user_id = "usr_000"

    def __init__(self, result=None):
        self.calls = []
        self.result = result or {"success": True, "balance": "5420.50"}

    async def dispatch(self, name, arguments):
        self.calls.append((name, arguments))
        return self.result


def sent_events(upstream) -> list[dict]:
    return [json.loads(frame) for frame in upstream.sent]


class TestSessionSetup:
    """Test connection and configuration of the upstream session."""

    @pytest.mark.asyncio
    async def test_session_update_is_sent_first(self, make_client_socket, make_upstream):
        client = make_client_socket([make_client_socket.text('{"type": "input_audio_buffer.commit"}')])
        upstream = make_upstream()
        session = RelaySession(client, StubDispatcher(), connector=upstream.connector(), instructions="Be brief.")

        await session.run()

        first = json.loads(upstream.sent[0])
        assert first["type"] == "session.update"
        assert first["session"]["instructions"] == "Be brief."
        assert len(first["session"]["tools"]) == 5

    @pytest.mark.asyncio
    async def test_connect_failure_closes_client(self, make_client_socket):
        client = make_client_socket()

        async def refuse():
            raise OSError("connection refused")

        session = RelaySession(client, StubDispatcher(), connector=refuse)
        await session.run()

        assert client.close_code == 1011
        assert session.state is RelayState.CLOSED

    @pytest.mark.asyncio
    async def test_handshake_rejection_closes_client(self, make_client_socket):
        client = make_client_socket()

        async def reject():
            raise websockets.InvalidHandshake("401")

        session = RelaySession(client, StubDispatcher(), connector=reject)
        await session.run()

        assert client.close_code == 1011

    def test_azure_headers(self, monkeypatch):
        from voicebank.config import settings

        monkeypatch.setattr(settings, "realtime_auth_style", "azure")
        monkeypatch.setattr(settings, "realtime_api_key", "secret")

        headers = upstream_headers()

        assert headers["api-key"] == "secret"
        assert "Authorization" not in headers

    def test_bearer_headers(self, monkeypatch):
        from voicebank.config import settings

        monkeypatch.setattr(settings, "realtime_auth_style", "openai")
        monkeypatch.setattr(settings, "realtime_api_key", "secret")

        assert upstream_headers()["Authorization"] == "Bearer secret"


class TestPassthrough:
    """Test frames flow unmodified in both directions."""

    @pytest.mark.asyncio
    async def test_client_frames_forwarded_verbatim(self, make_client_socket, make_upstream):
        text_frame = '{"type":"input_audio_buffer.append","audio":"AAA="}'
        client = make_client_socket(
            [
                make_client_socket.text(text_frame),
                make_client_socket.binary(b"\x00\x01\x02"),
                make_client_socket.disconnect(),
            ]
        )
        upstream = make_upstream(end=False)

        await RelaySession(client, StubDispatcher(), connector=upstream.connector()).run()

        assert upstream.sent[1:] == [text_frame, b"\x00\x01\x02"]

    @pytest.mark.asyncio
    async def test_upstream_frames_forwarded_in_order(self, make_client_socket, make_upstream):
        client = make_client_socket()
        upstream = make_upstream([AUDIO_DELTA, RESPONSE_DONE])

        await RelaySession(client, StubDispatcher(), connector=upstream.connector()).run()

        assert client.sent == [AUDIO_DELTA, RESPONSE_DONE]

    @pytest.mark.asyncio
    async def test_non_json_frame_forwarded(self, make_client_socket, make_upstream):
        client = make_client_socket()
        upstream = make_upstream(["not json", b"\xff\xfe"])

        await RelaySession(client, StubDispatcher(), connector=upstream.connector()).run()

        assert client.sent == ["not json", b"\xff\xfe"]


class TestToolCalls:
    """Test tool-call interception and result injection."""

    @pytest.mark.asyncio
    async def test_tool_call_is_intercepted(self, make_client_socket, make_upstream):
        client = make_client_socket()
        upstream = make_upstream([AUDIO_DELTA, tool_call(), RESPONSE_DONE])
        dispatcher = StubDispatcher()

        await RelaySession(client, dispatcher, connector=upstream.connector()).run()

        # The browser never sees the tool call
        assert client.sent == [AUDIO_DELTA, RESPONSE_DONE]
        assert dispatcher.calls == [("get_balance", '{"accountType": "Checking"}')]

        injected = sent_events(upstream)[1:]
        assert [e["type"] for e in injected] == ["conversation.item.create", "response.create"]
        assert injected[0]["item"]["call_id"] == "call_1"
        assert json.loads(injected[0]["item"]["output"]) == dispatcher.result

    @pytest.mark.asyncio
    async def test_results_injected_in_call_order(self, make_client_socket, make_upstream):
        client = make_client_socket()
        upstream = make_upstream([tool_call("call_a"), tool_call("call_b")])

        await RelaySession(client, StubDispatcher(), connector=upstream.connector()).run()

        injected = sent_events(upstream)[1:]
        assert [e["type"] for e in injected] == [
            "conversation.item.create",
            "response.create",
            "conversation.item.create",
            "response.create",
        ]
        assert [injected[0]["item"]["call_id"], injected[2]["item"]["call_id"]] == ["call_a", "call_b"]

    @pytest.mark.asyncio
    async def test_error_result_is_still_injected(self, make_client_socket, make_upstream):
        client = make_client_socket()
        upstream = make_upstream([tool_call(name="withdraw_funds", arguments="{oops")])
        dispatcher = StubDispatcher({"success": False, "error": "x", "error_code": "PROTO_001"})

        await RelaySession(client, dispatcher, connector=upstream.connector()).run()

        injected = sent_events(upstream)[1:]
        assert json.loads(injected[0]["item"]["output"])["error_code"] == "PROTO_001"
        assert injected[1]["type"] == "response.create"

    @pytest.mark.asyncio
    async def test_tool_call_without_call_id_is_dropped(self, make_client_socket, make_upstream):
        client = make_client_socket()
        upstream = make_upstream([tool_call(call_id=None), RESPONSE_DONE])
        dispatcher = StubDispatcher()

        await RelaySession(client, dispatcher, connector=upstream.connector()).run()

        assert dispatcher.calls == []
        assert client.sent == [RESPONSE_DONE]
        assert len(upstream.sent) == 1

    @pytest.mark.asyncio
    async def test_state_during_dispatch(self, make_client_socket, make_upstream):
        client = make_client_socket()
        upstream = make_upstream([tool_call()])
        seen = []

        class Recording(StubDispatcher):
            async def dispatch(self, name, arguments):
                seen.append(session.state)
                return await super().dispatch(name, arguments)

        session = RelaySession(client, Recording(), connector=upstream.connector())
        await session.run()

        assert seen == [RelayState.TOOL_PENDING]


class TestTeardown:
    """Test either side going away closes the other."""

    @pytest.mark.asyncio
    async def test_client_disconnect_closes_upstream(self, make_client_socket, make_upstream):
        client = make_client_socket([make_client_socket.disconnect()])
        upstream = make_upstream(end=False)
        session = RelaySession(client, StubDispatcher(), connector=upstream.connector())

        await session.run()

        assert upstream.closed is True
        assert session.state is RelayState.CLOSED

    @pytest.mark.asyncio
    async def test_upstream_close_closes_client(self, make_client_socket, make_upstream):
        client = make_client_socket()
        upstream = make_upstream()
        session = RelaySession(client, StubDispatcher(), connector=upstream.connector())

        await session.run()

        assert client.close_code == 1000
        assert session.state is RelayState.CLOSED

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, make_client_socket, make_upstream):
        client = make_client_socket()
        upstream = make_upstream()
        session = RelaySession(client, StubDispatcher(), connector=upstream.connector())

        await session.run()
        await session.close()

        assert session.state is RelayState.CLOSED
