"""Room naming, the in-process membership registry and meeting-room access.

Current conventions:
- ``user:<userId>``: one per authenticated user, joined at connect
- ``meeting:<meetingId>``: joined on request by the meeting owner's connections

Nothing here is persisted; a reconnecting client has to join again.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections import defaultdict
from typing import Any, Awaitable, Callable

from backend.realtime.connection import Connection
from backend.realtime.errors import AuthorizationFailure, NotFound
from backend.services.meeting_store import MeetingStore

logger = logging.getLogger(__name__)

MEETING_ID_PATTERN = re.compile(r"[0-9]+")

Emitter = Callable[[str, dict[str, Any], str], Awaitable[None]]


def room_for_user(user_id: int) -> str:
    return f"user:{int(user_id)}"


def room_for_meeting(meeting_id: int) -> str:
    return f"meeting:{int(meeting_id)}"


def parse_meeting_id(value: Any) -> int:
    if isinstance(value, bool):
        raise NotFound()
    if isinstance(value, int):
        return value
    if isinstance(value, str) and MEETING_ID_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise NotFound()


class RoomRegistry:
    """Room -> member sids, shared by every connection of one router.

    Mutations and snapshots go through a single lock so a broadcast always
    sees a consistent member set.
    """

    def __init__(self):
        self._rooms: dict[str, set[str]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def add(self, room: str, connection: Connection) -> None:
        async with self._lock:
            self._rooms[room].add(connection.sid)
            connection.rooms.add(room)

    async def discard(self, room: str, connection: Connection) -> None:
        async with self._lock:
            self._discard(room, connection.sid)
            connection.rooms.discard(room)

    async def discard_all(self, connection: Connection) -> set[str]:
        async with self._lock:
            left = set(connection.rooms)
            for room in left:
                self._discard(room, connection.sid)
            connection.rooms.clear()
        return left

    async def members(self, room: str) -> frozenset[str]:
        async with self._lock:
            return frozenset(self._rooms.get(room, ()))

    def _discard(self, room: str, sid: str) -> None:
        members = self._rooms.get(room)
        if members is None:
            return
        members.discard(sid)
        if not members:
            del self._rooms[room]

    def __contains__(self, room: str) -> bool:
        return room in self._rooms


class RoomMembershipManager:
    def __init__(self, registry: RoomRegistry, store: MeetingStore, emit: Emitter):
        self.registry = registry
        self.store = store
        self.emit = emit

    async def join_private_room(self, connection: Connection, user_id: int) -> None:
        await self.registry.add(room_for_user(user_id), connection)

    async def authorize(self, connection: Connection, meeting_id: int):
        """Load the meeting and check that ``connection`` belongs to its owner."""
        meeting = await self.store.get_meeting(meeting_id)
        if meeting is None:
            raise NotFound()
        if meeting.user_id != connection.user_id:
            logger.warning(
                "User %s denied access to meeting %s owned by %s",
                connection.user_id,
                meeting_id,
                meeting.user_id,
            )
            raise AuthorizationFailure()
        return meeting

    async def join_meeting_room(self, connection: Connection, meeting_id: Any) -> None:
        parsed_id = parse_meeting_id(meeting_id)
        await self.authorize(connection, parsed_id)
        if not connection.is_authenticated:
            # disconnected while the store lookup was pending
            return
        await self.registry.add(room_for_meeting(parsed_id), connection)
        logger.info("Connection %s joined meeting %s", connection.sid, meeting_id)
        await self.emit("joined-meeting", {"meetingId": meeting_id}, connection.sid)

    async def leave_meeting_room(self, connection: Connection, meeting_id: Any) -> None:
        try:
            room = room_for_meeting(parse_meeting_id(meeting_id))
        except NotFound:
            return
        await self.registry.discard(room, connection)

    async def release(self, connection: Connection) -> set[str]:
        return await self.registry.discard_all(connection)
