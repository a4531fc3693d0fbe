from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


# Chat
class HistoryItem(BaseModel):
    """A previous message as stored by the chat UI."""

    sender: Literal["user", "bot"]
    text: str


class ChatRequest(BaseModel):
    """A user turn plus the conversation so far."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="User message")
    history: List[HistoryItem] = Field(default_factory=list)
    is_first_message: bool | None = Field(
        default=None,
        alias="isFirstMessage",
        description="Overrides first-turn detection when history is not kept (speech mode)",
    )


class ChatResponse(BaseModel):
    reply: str


class ErrorResponse(BaseModel):
    error: str


# Speech
class SpeechRequest(BaseModel):
    text: str | None = None
    voice: str | None = Field(default=None, description="Voice name of the speech model")
    speed: float | None = Field(default=None, ge=0.25, le=4.0)


# Admin
class ReindexResponse(BaseModel):
    """Outcome of a lore index rebuild."""

    state: Literal["uninitialized", "building", "ready", "inactive", "failed"]
    documents: int = Field(0, ge=0)
    skipped_documents: int = Field(0, ge=0)
    indexed_chunks: int = Field(0, ge=0, description="Chunks in the published index")
    elapsed_sec: float | None = Field(None, ge=0)
    error: str | None = None


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    index_state: str
    indexed_chunks: int


__all__ = [
    "HistoryItem",
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "SpeechRequest",
    "ReindexResponse",
    "HealthResponse",
]
