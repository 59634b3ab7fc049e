"""Unit tests for the client chat session."""
import asyncio
import json

import httpx
import pytest

from app.chat.client import ChatClientSession, SessionState, describe_sender
from fakes import FakeClientConnection


def new_message(message_id, text, sender_id="u1", role="customer"):
    return {
        "type": "new_message",
        "message": {
            "id": message_id,
            "senderId": sender_id,
            "senderRole": role,
            "message": text,
            "taggedUsers": [],
            "createdAt": "2026-10-17T09:30:00Z",
        },
    }


async def settle():
    for _ in range(5):
        await asyncio.sleep(0)


def make_session(connection=None, connect=None, http_client=None):
    opened = []

    async def fake_connect(url):
        opened.append(url)
        return connection

    session = ChatClientSession(
        ws_url="ws://testserver/api/ws",
        api_url="http://testserver/api/",
        token="tok en",
        sender_id="u1",
        sender_role="customer",
        connect=connect or fake_connect,
        http_client=http_client,
    )
    return session, opened


class TestStateMachine:
    """Tests for Connecting / Open / Closed transitions."""

    @pytest.mark.asyncio
    async def test_connect_opens_session(self):
        connection = FakeClientConnection()
        session, opened = make_session(connection)
        assert session.state is SessionState.CONNECTING

        assert await session.connect() is True

        assert session.state is SessionState.OPEN
        assert session.is_connected
        assert opened == ["ws://testserver/api/ws?token=tok+en"]
        await session.close()

    @pytest.mark.asyncio
    async def test_handshake_failure_closes_session(self):
        async def refuse(url):
            raise ConnectionRefusedError("connection refused")

        session, _ = make_session(connect=refuse)

        assert await session.connect() is False
        assert session.state is SessionState.CLOSED
        assert await session.send("anyone there?") is False

    @pytest.mark.asyncio
    async def test_server_close_ends_session_without_reconnect(self):
        connection = FakeClientConnection()
        session, opened = make_session(connection)
        await session.connect()

        connection.drop()
        await settle()

        assert session.state is SessionState.CLOSED
        assert await session.send("hello") is False
        assert connection.sent == []
        assert await session.connect() is False
        assert len(opened) == 1

    @pytest.mark.asyncio
    async def test_close(self):
        connection = FakeClientConnection()
        session, _ = make_session(connection)
        await session.connect()

        await session.close()

        assert connection.closed
        assert session.state is SessionState.CLOSED


class TestSend:
    """Tests for fire-and-forget sends."""

    @pytest.mark.asyncio
    async def test_send_before_connect_is_noop(self):
        connection = FakeClientConnection()
        session, _ = make_session(connection)

        assert await session.send("too early") is False
        assert connection.sent == []

    @pytest.mark.asyncio
    async def test_blank_content_is_noop(self):
        connection = FakeClientConnection()
        session, _ = make_session(connection)
        await session.connect()

        assert await session.send("   ") is False
        assert await session.send("") is False
        assert connection.sent == []
        await session.close()

    @pytest.mark.asyncio
    async def test_send_transmits_trimmed_chat_event(self):
        connection = FakeClientConnection()
        session, _ = make_session(connection)
        await session.connect()

        assert await session.send("  hi @admin1  ") is True

        assert [json.loads(frame) for frame in connection.sent] == [
            {"type": "chat_message", "senderId": "u1", "senderRole": "customer", "content": "hi @admin1"}
        ]
        # No local echo: the message appears only once the relay broadcasts it
        assert session.view == []
        await session.close()


class TestLocalView:
    """Tests for the history + live view."""

    @pytest.mark.asyncio
    async def test_live_messages_append_in_arrival_order(self):
        connection = FakeClientConnection()
        session, _ = make_session(connection)
        session.load_history([new_message(1, "old")["message"]])
        await session.connect()

        connection.push(json.dumps(new_message(3, "third")))
        connection.push(json.dumps({"type": "ping"}))
        connection.push("not json")
        connection.push(json.dumps(new_message(2, "second")))
        await settle()

        assert [m["message"] for m in session.view] == ["old", "third", "second"]
        assert session.state is SessionState.OPEN
        await session.close()

    @pytest.mark.asyncio
    async def test_new_message_without_body_is_skipped(self):
        connection = FakeClientConnection()
        session, _ = make_session(connection)
        await session.connect()

        connection.push(json.dumps({"type": "new_message"}))
        connection.push(json.dumps({"type": "new_message", "message": "just text"}))
        connection.push(json.dumps(new_message(1, "valid")))
        await settle()

        assert session.state is SessionState.OPEN
        assert [m["message"] for m in session.view] == ["valid"]
        await session.close()
        assert session.state is SessionState.CLOSED

    @pytest.mark.asyncio
    async def test_history_and_live_are_not_deduplicated(self):
        connection = FakeClientConnection()
        session, _ = make_session(connection)
        session.load_history([new_message(5, "racing")["message"]])
        await session.connect()

        connection.push(json.dumps(new_message(5, "racing")))
        await settle()

        assert [m["id"] for m in session.view] == [5, 5]
        await session.close()

    @pytest.mark.asyncio
    async def test_fetch_history_once(self):
        requests = []
        page = [new_message(1, "a")["message"], new_message(2, "b")["message"]]

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=page)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            session, _ = make_session(FakeClientConnection(), http_client=http_client)

            assert await session.fetch_history() == page
            assert await session.fetch_history(limit=10) == page

        assert len(requests) == 1
        request = requests[0]
        assert request.url.path == "/api/messages"
        assert request.url.params["limit"] == "50"
        assert request.headers["Authorization"] == "Bearer tok en"
        assert session.history == page

    @pytest.mark.asyncio
    async def test_fetch_history_error_propagates(self):
        def handler(request):
            return httpx.Response(401, json={"detail": "Could not validate credentials"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            session, _ = make_session(FakeClientConnection(), http_client=http_client)

            with pytest.raises(httpx.HTTPStatusError):
                await session.fetch_history()

        assert session.history == []


class TestDescribeSender:
    """Tests for describe_sender labels."""

    @pytest.mark.parametrize(
        "message, label",
        [
            ({"senderRole": "superadmin", "sender": {"firstName": "Sam", "lastName": "Hale"}}, "SuperAdmin • Sam Hale"),
            ({"senderRole": "admin", "sender": {"firstName": "Ada", "lastName": "Stone"}}, "Admin • Ada Stone"),
            ({"senderRole": "customer", "sender": {"firstName": "Uma", "lastName": "Reyes"}}, "Uma Reyes"),
            ({"senderRole": "customer", "sender": {}}, "Customer"),
            ({"senderRole": "admin"}, "Admin"),
            ({"senderRole": "robot"}, "User"),
        ],
    )
    def test_labels(self, message, label):
        assert describe_sender(message) == label
