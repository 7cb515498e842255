from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable

from pydantic import ValidationError

from backend.models.meeting_model import Meeting, MeetingSummary, TranscriptEntry
from backend.realtime.errors import DependencyUnavailable, NotFound
from backend.services.repository import MeetingRepository

logger = logging.getLogger(__name__)


class MeetingStore:
    """Async view of the repository used by the realtime layer.

    Repository calls block on file I/O, so each one runs in a worker thread.
    Storage failures surface as ``DependencyUnavailable``.
    """

    def __init__(self, repository: MeetingRepository | None = None):
        self.repository = repository or MeetingRepository()

    async def _call(self, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(func, *args)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.error("Meeting store call %s failed: %s", func.__name__, exc)
            raise DependencyUnavailable() from exc

    async def get_meeting(self, meeting_id: int) -> Meeting | None:
        return await self._call(self.repository.get_meeting, meeting_id)

    async def append_transcript(self, meeting_id: int, entry: TranscriptEntry) -> None:
        await self._call(self.repository.create_transcript, meeting_id, entry)

    async def list_transcripts(self, meeting_id: int) -> list[TranscriptEntry]:
        return await self._call(self.repository.list_transcripts, meeting_id)

    async def replace_summary(self, meeting_id: int, summary: MeetingSummary) -> None:
        try:
            await self._call(self.repository.replace_summary, meeting_id, summary)
        except KeyError as exc:
            raise NotFound() from exc
