from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import List

from backend.models.meeting_model import Meeting, MeetingSummary, TranscriptEntry
from backend.utils.time_utils import now_iso


class MeetingRepository:
    """JSON-file backed store for meetings and their transcripts."""

    def __init__(self, storage_path: Path | None = None):
        self.storage_path = storage_path or Path(__file__).resolve().parents[1] / "data" / "meetings.json"
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _read_raw(self) -> dict:
        if not self.storage_path.exists():
            return {"meetings": [], "transcripts": []}
        payload = json.loads(self.storage_path.read_text(encoding="utf-8") or "{}")
        payload.setdefault("meetings", [])
        payload.setdefault("transcripts", [])
        return payload

    def _write_raw(self, payload: dict) -> None:
        self.storage_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    @staticmethod
    def _next_id(items: list[dict]) -> int:
        return max((item["id"] for item in items), default=0) + 1

    def get_meeting(self, meeting_id: int) -> Meeting | None:
        with self._lock:
            for item in self._read_raw()["meetings"]:
                if item.get("id") == meeting_id:
                    return Meeting.model_validate(item)
        return None

    def create_meeting(self, user_id: int, title: str, status: str = "recording") -> Meeting:
        with self._lock:
            data = self._read_raw()
            now = now_iso()
            meeting = Meeting(
                meeting_id=self._next_id(data["meetings"]),
                user_id=user_id,
                title=title,
                status=status,
                created_at=now,
                updated_at=now,
            )
            data["meetings"].append(meeting.to_wire())
            self._write_raw(data)
        return meeting

    def update_meeting(self, meeting_id: int, **updates) -> Meeting:
        with self._lock:
            data = self._read_raw()
            for idx, item in enumerate(data["meetings"]):
                if item.get("id") == meeting_id:
                    updated = Meeting.model_validate(item).model_copy(update={**updates, "updated_at": now_iso()})
                    data["meetings"][idx] = updated.to_wire()
                    self._write_raw(data)
                    return updated
        raise KeyError(f"Meeting {meeting_id} not found")

    def replace_summary(self, meeting_id: int, summary: MeetingSummary) -> Meeting:
        return self.update_meeting(meeting_id, summary=summary)

    def create_transcript(self, meeting_id: int, entry: TranscriptEntry) -> TranscriptEntry:
        with self._lock:
            data = self._read_raw()
            created = entry.model_copy(update={"id": self._next_id(data["transcripts"]), "meeting_id": meeting_id})
            data["transcripts"].append(created.to_wire())
            self._write_raw(data)
        return created

    def list_transcripts(self, meeting_id: int) -> List[TranscriptEntry]:
        with self._lock:
            payload = self._read_raw()
        rows = [item for item in payload["transcripts"] if item.get("meetingId") == meeting_id]
        rows.sort(key=lambda item: (item["timestamp"], item["id"]))
        return [TranscriptEntry.model_validate(item) for item in rows]
