import pytest
from socketio import exceptions

from conftest import JWT_SECRET, make_token
from backend.realtime.server import RealtimeServer, extract_token
from backend.services.token_verifier import TokenVerifier


class FakeSocketServer:
    def __init__(self):
        self.handlers = {}
        self.emitted = []

    def on(self, event, handler=None, namespace=None):
        self.handlers[event] = handler

    async def emit(self, event, data=None, to=None, **kwargs):
        self.emitted.append((event, data, to))


@pytest.fixture
def sio():
    return FakeSocketServer()


@pytest.fixture
def server(store, sio):
    return RealtimeServer(store, TokenVerifier(secret=JWT_SECRET), sio=sio)


def test_extract_token_prefers_auth_payload():
    environ = {"QUERY_STRING": "token=from-query"}
    assert extract_token(environ, {"token": "from-auth"}) == "from-auth"
    assert extract_token(environ, None) == "from-query"
    assert extract_token({"asgi.scope": {"query_string": b"EIO=4&token=scoped"}}, {}) == "scoped"
    assert extract_token({}, {"token": ""}) is None
    assert extract_token(None, None) is None


def test_handlers_registered(server, sio):
    assert set(sio.handlers) == {"connect", "disconnect", "join-meeting", "leave-meeting", "transcript", "summary"}


@pytest.mark.asyncio
async def test_connect_refuses_bad_token(server, sio):
    with pytest.raises(exceptions.ConnectionRefusedError):
        await sio.handlers["connect"]("sid-1", {}, {"token": "bad"})
    assert "sid-1" not in server.router.connections


@pytest.mark.asyncio
async def test_event_flow_through_socket_handlers(server, sio, store):
    meeting = store.repository.create_meeting(user_id=1, title="Demo")
    await sio.handlers["connect"]("sid-1", {}, {"token": make_token(1)})

    await sio.handlers["join-meeting"]("sid-1", meeting.meeting_id)
    await sio.handlers["transcript"]("sid-1", {"meetingId": meeting.meeting_id, "text": "hi", "timestamp": 1})

    assert sio.emitted[0] == ("joined-meeting", {"meetingId": meeting.meeting_id}, "sid-1")
    event, payload, to = sio.emitted[1]
    assert (event, to) == ("transcript-update", "sid-1")
    assert payload["transcript"][0]["text"] == "hi"

    await sio.handlers["disconnect"]("sid-1", "client disconnect")
    assert server.router.connections == {}
