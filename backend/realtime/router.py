from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from backend.models.event_model import SummaryEvent, TranscriptEvent
from backend.models.meeting_model import TranscriptEntry
from backend.realtime.connection import Connection
from backend.realtime.errors import AuthenticationFailure, RealtimeError
from backend.realtime.rooms import (
    Emitter,
    RoomMembershipManager,
    RoomRegistry,
    parse_meeting_id,
    room_for_meeting,
)
from backend.services.meeting_store import MeetingStore
from backend.services.token_verifier import TokenVerifier
from backend.utils.time_utils import now_epoch, now_utc

JOIN_MEETING = "join-meeting"
LEAVE_MEETING = "leave-meeting"
TRANSCRIPT = "transcript"
SUMMARY = "summary"

FALLBACK_ERRORS = {
    JOIN_MEETING: "Failed to join meeting",
    LEAVE_MEETING: "Failed to leave meeting",
    TRANSCRIPT: "Failed to save transcript",
    SUMMARY: "Failed to save summary",
}


class EventRouter:
    """Connection lifecycle and event dispatch for the realtime channel.

    Transport-agnostic: the Socket.IO binding hands over sids, tokens and
    event payloads, and ``emit(event, payload, sid)`` delivers to one
    connection. Each router owns its own connection table and room registry.
    """

    def __init__(
        self,
        store: MeetingStore,
        verifier: TokenVerifier,
        emit: Emitter,
        registry: RoomRegistry | None = None,
    ):
        self.store = store
        self.verifier = verifier
        self.emit = emit
        self.registry = registry or RoomRegistry()
        self.rooms = RoomMembershipManager(self.registry, store, emit)
        self.connections: dict[str, Connection] = {}
        self.logger = logging.getLogger(__name__)
        self._handlers: dict[str, Callable[[Connection, Any], Awaitable[None]]] = {
            JOIN_MEETING: self.handle_join_meeting,
            LEAVE_MEETING: self.handle_leave_meeting,
            TRANSCRIPT: self.handle_transcript,
            SUMMARY: self.handle_summary,
        }

    @property
    def events(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    async def connect(self, sid: str, token: str | None) -> Connection:
        connection = Connection(sid=sid)
        try:
            user_id = await self.verifier.verify(token)
        except AuthenticationFailure as exc:
            connection.close()
            self.logger.info("Connection %s refused: %s", sid, exc.message)
            raise
        connection.authenticate(user_id)
        self.connections[sid] = connection
        await self.rooms.join_private_room(connection, user_id)
        self.logger.info("Client connected: %s, user id: %s", sid, user_id)
        return connection

    async def disconnect(self, sid: str) -> None:
        connection = self.connections.pop(sid, None)
        if connection is None:
            return
        connection.close()
        left = await self.rooms.release(connection)
        self.logger.info("Client disconnected: %s, released rooms: %s", sid, sorted(left))

    async def dispatch(self, sid: str, event: str, payload: Any) -> None:
        connection = self.connections.get(sid)
        if connection is None or not connection.is_authenticated:
            self.logger.debug("Dropping %s from unknown or closed connection %s", event, sid)
            return
        handler = self._handlers.get(event)
        if handler is None:
            self.logger.debug("Ignoring unknown event %s from %s", event, sid)
            return
        try:
            await handler(connection, payload)
        except RealtimeError as exc:
            await self.emit_error(connection, exc.message)
        except ValidationError:
            await self.emit_error(connection, "Invalid payload")
        except Exception:
            self.logger.exception("Unhandled error in %s handler for connection %s", event, sid)
            await self.emit_error(connection, FALLBACK_ERRORS.get(event, "Request failed"))

    async def emit_error(self, connection: Connection, message: str) -> None:
        try:
            await self.emit("error", {"message": message}, connection.sid)
        except Exception:
            self.logger.exception("Failed to deliver error event to %s", connection.sid)

    async def broadcast(self, room: str, event: str, payload: dict[str, Any]) -> int:
        members = await self.registry.members(room)
        if not members:
            return 0
        results = await asyncio.gather(
            *(self.emit(event, payload, sid) for sid in members),
            return_exceptions=True,
        )
        for sid, result in zip(members, results):
            if isinstance(result, Exception):
                self.logger.warning("Error sending %s to connection %s in %s: %s", event, sid, room, result)
        self.logger.debug("Broadcast %s to %s connections in %s", event, len(members), room)
        return len(members)

    async def handle_join_meeting(self, connection: Connection, meeting_id: Any) -> None:
        await self.rooms.join_meeting_room(connection, meeting_id)

    async def handle_leave_meeting(self, connection: Connection, meeting_id: Any) -> None:
        await self.rooms.leave_meeting_room(connection, meeting_id)

    async def handle_transcript(self, connection: Connection, payload: Any) -> None:
        event = TranscriptEvent.model_validate(payload)
        meeting_id = parse_meeting_id(event.meeting_id)
        await self.rooms.authorize(connection, meeting_id)

        entry = TranscriptEntry(
            text=event.text,
            timestamp=event.timestamp or now_epoch(),
            speaker_id=event.speaker_id,
            speaker_name=event.speaker_name,
            is_highlighted=False,
        )
        await self.store.append_transcript(meeting_id, entry)
        transcripts = await self.store.list_transcripts(meeting_id)
        await self.broadcast(
            room_for_meeting(meeting_id),
            "transcript-update",
            {"meetingId": event.meeting_id, "transcript": [item.to_wire() for item in transcripts]},
        )

    async def handle_summary(self, connection: Connection, payload: Any) -> None:
        event = SummaryEvent.model_validate(payload)
        meeting_id = parse_meeting_id(event.meeting_id)
        await self.rooms.authorize(connection, meeting_id)

        summary = event.summary.model_copy(update={"last_updated": now_utc()})
        await self.store.replace_summary(meeting_id, summary)
        updated = await self.store.get_meeting(meeting_id)
        persisted = updated.summary if updated is not None and updated.summary is not None else summary
        await self.broadcast(
            room_for_meeting(meeting_id),
            "summary-update",
            {"meetingId": event.meeting_id, "summary": persisted.to_wire()},
        )
