"""Transport doubles shared by the test modules."""
import asyncio

from starlette.websockets import WebSocketState


class FakeWebSocket:
    """Stand-in for a Starlette WebSocket that records sent payloads."""

    def __init__(self, state=WebSocketState.CONNECTED, fail_with=None, release=None):
        self.client_state = state
        self.application_state = state
        self.fail_with = fail_with
        self.release = release
        self.sent = []

    async def send_json(self, payload):
        if self.release is not None:
            await self.release.wait()
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(payload)


_CLOSED = object()


class FakeClientConnection:
    """Stand-in for a ``websockets`` client connection."""

    def __init__(self):
        self.sent = []
        self.closed = False
        self._incoming = asyncio.Queue()

    def push(self, frame):
        """Deliver a frame as if the server had sent it."""
        self._incoming.put_nowait(frame)

    def drop(self):
        """End the stream as if the server had closed the connection."""
        self._incoming.put_nowait(_CLOSED)

    async def send(self, data):
        self.sent.append(data)

    async def close(self):
        self.closed = True
        self.drop()

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self._incoming.get()
        if frame is _CLOSED:
            raise StopAsyncIteration
        return frame
