from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class TodoItem(CamelModel):
    text: str
    assignee: str | None = None
    due_date: datetime | None = None
    completed: bool = False
    priority: Literal["low", "medium", "high"] | None = None


class MeetingSummary(CamelModel):
    keywords: list[str] = Field(default_factory=list)
    summary: str = ""
    todos: list[TodoItem] = Field(default_factory=list)
    action_items: list[str] | None = None
    decisions: list[str] | None = None
    last_updated: datetime | None = None


class TranscriptEntry(CamelModel):
    id: int | None = None
    meeting_id: int | None = None
    text: str
    timestamp: int
    speaker_id: str | None = None
    speaker_name: str | None = None
    is_highlighted: bool = False
    confidence: float | None = None


class Meeting(CamelModel):
    meeting_id: int = Field(alias="id")
    user_id: int
    title: str
    status: Literal["recording", "completed", "archived"] = "completed"
    summary: MeetingSummary | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: str
    updated_at: str
