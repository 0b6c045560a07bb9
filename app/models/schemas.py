"""
Pydantic schemas for chat API requests and responses.

Defines input validation for incoming messages, the chat turn shape shared by
the service and the API, and the response envelopes.
"""

from __future__ import annotations

import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

# Basic input constraints
MAX_MESSAGE_CHARS = 4000

Role = Literal["user", "assistant"]


class ChatTurn(BaseModel):
    """
    One message in a conversation.

    Conversation order is list order; ids are assigned when the turn is created.
    """
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    content: str


class UserRecord(BaseModel):
    """A user as loaded from the store, with its turns oldest first."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    chats: List[ChatTurn] = Field(default_factory=list)


class ChatRequest(BaseModel):
    """Request payload for the append-and-complete endpoint."""
    message: str

    @field_validator("message")
    @classmethod
    def _validate_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty.")
        if len(v) > MAX_MESSAGE_CHARS:
            raise ValueError(f"message exceeds {MAX_MESSAGE_CHARS} characters.")
        return v


class ChatsResponse(BaseModel):
    """Successful response carrying the user's full conversation."""
    message: Literal["OK"] = "OK"
    chats: List[ChatTurn]


class ErrorResponse(BaseModel):
    message: Literal["ERROR"] = "ERROR"
    cause: str
