"""
Prompt builder for chat completions.

Consumes:
- The user's prior turns, oldest first
- The new message from the user

Produces:
- The Chat Completions `messages` list, with an optional leading system prompt.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from app.models.schemas import ChatTurn

# {"role": "system"|"user"|"assistant", "content": "..."}
ApiMessage = Dict[str, str]


def to_api_role(role: str) -> str:
    """Map a stored role to the API role: "user" stays user, anything else is the model."""
    return "user" if (role or "").strip().lower() == "user" else "assistant"


def build_messages(
    history: Sequence[ChatTurn],
    latest_user_message: str,
    system_prompt: Optional[str] = None,
) -> List[ApiMessage]:
    """
    Builds the request messages: prior history followed by the live prompt.
    The history must be ordered oldest to newest and must not include the new message.
    """
    messages: List[ApiMessage] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})

    for turn in history:
        content = (turn.content or "").strip()
        if not content:
            continue
        messages.append({"role": to_api_role(turn.role), "content": content})

    messages.append({"role": "user", "content": latest_user_message})
    return messages
