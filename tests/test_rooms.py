import pytest

from conftest import FakeEmitter
from backend.realtime.connection import Connection, ConnectionState
from backend.realtime.errors import AuthorizationFailure, NotFound
from backend.realtime.rooms import (
    RoomMembershipManager,
    RoomRegistry,
    parse_meeting_id,
    room_for_meeting,
    room_for_user,
)


def authenticated(sid, user_id):
    connection = Connection(sid=sid)
    connection.authenticate(user_id)
    return connection


def test_room_names():
    assert room_for_user(1) == "user:1"
    assert room_for_meeting("42") == "meeting:42"


@pytest.mark.parametrize("value, expected", [(42, 42), ("42", 42), (" 7 ", 7)])
def test_parse_meeting_id(value, expected):
    assert parse_meeting_id(value) == expected


@pytest.mark.parametrize("value", [None, "abc", True, {"id": 1}, "4_2", "\uff14\uff12", "-1", "1.5"])
def test_parse_meeting_id_rejects_garbage(value):
    with pytest.raises(NotFound):
        parse_meeting_id(value)


def test_connection_user_is_set_once():
    connection = authenticated("s1", 1)
    assert connection.state is ConnectionState.AUTHENTICATED
    with pytest.raises(RuntimeError):
        connection.authenticate(2)


@pytest.mark.asyncio
async def test_registry_tracks_members_and_drops_empty_rooms():
    registry = RoomRegistry()
    first, second = authenticated("s1", 1), authenticated("s2", 1)

    await registry.add("meeting:1", first)
    await registry.add("meeting:1", second)
    assert await registry.members("meeting:1") == frozenset({"s1", "s2"})

    await registry.discard("meeting:1", first)
    await registry.discard("meeting:1", first)
    assert await registry.members("meeting:1") == frozenset({"s2"})

    await registry.discard("meeting:1", second)
    assert "meeting:1" not in registry
    assert await registry.members("meeting:1") == frozenset()


@pytest.mark.asyncio
async def test_registry_discard_all_releases_every_room():
    registry = RoomRegistry()
    connection = authenticated("s1", 1)
    await registry.add("user:1", connection)
    await registry.add("meeting:3", connection)

    left = await registry.discard_all(connection)

    assert left == {"user:1", "meeting:3"}
    assert connection.rooms == set()
    assert await registry.members("user:1") == frozenset()


@pytest.mark.asyncio
async def test_registries_are_isolated():
    first, second = RoomRegistry(), RoomRegistry()
    await first.add("meeting:1", authenticated("s1", 1))
    assert await second.members("meeting:1") == frozenset()


@pytest.mark.asyncio
async def test_join_meeting_room_requires_owner(store):
    meeting = store.repository.create_meeting(user_id=1, title="Owned")
    emitter = FakeEmitter()
    manager = RoomMembershipManager(RoomRegistry(), store, emitter)
    owner, stranger = authenticated("s1", 1), authenticated("s2", 2)

    await manager.join_meeting_room(owner, meeting.meeting_id)
    with pytest.raises(AuthorizationFailure):
        await manager.join_meeting_room(stranger, meeting.meeting_id)
    with pytest.raises(NotFound):
        await manager.join_meeting_room(owner, 999)

    room = room_for_meeting(meeting.meeting_id)
    assert await manager.registry.members(room) == frozenset({"s1"})
    assert emitter.sent == [("joined-meeting", {"meetingId": meeting.meeting_id}, "s1")]


@pytest.mark.asyncio
async def test_leave_meeting_room_is_idempotent(store):
    meeting = store.repository.create_meeting(user_id=1, title="Owned")
    manager = RoomMembershipManager(RoomRegistry(), store, FakeEmitter())
    owner = authenticated("s1", 1)

    await manager.join_meeting_room(owner, meeting.meeting_id)
    await manager.leave_meeting_room(owner, meeting.meeting_id)
    await manager.leave_meeting_room(owner, meeting.meeting_id)
    await manager.leave_meeting_room(owner, "garbage")

    assert await manager.registry.members(room_for_meeting(meeting.meeting_id)) == frozenset()
