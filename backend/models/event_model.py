from __future__ import annotations

from backend.models.meeting_model import CamelModel, MeetingSummary


class TranscriptEvent(CamelModel):
    meeting_id: int | str
    text: str
    timestamp: int | None = None
    speaker_id: str | None = None
    speaker_name: str | None = None


class SummaryEvent(CamelModel):
    meeting_id: int | str
    summary: MeetingSummary
