"""
Conversation service orchestrating the chat flow for one user:
- Append a message, ask the AI service for a reply, persist both turns
- List the stored turns
- Clear the stored turns

Mutations on the same user are serialized through an optional per-user lock.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from app.core.config import settings
from app.core.errors import ConflictError, ForbiddenError, NotFoundError, UpstreamError
from app.models.schemas import ChatTurn, UserRecord
from app.persistence.redis_lock import UserLock
from app.persistence.user_store import UserStore
from app.services.openai_client import ChatCompletionClient

# Configure module logger
logger = logging.getLogger("conversation_service")

LOCK_RETRY_DELAY_SECONDS = 0.1


class ConversationService:
    """
    High-level service over one user's conversation.
    One instance is built per request; collaborators are passed in.
    """

    def __init__(
        self,
        store: UserStore,
        llm: ChatCompletionClient,
        lock: Optional[UserLock] = None,
    ) -> None:
        # Ensure logger level respects DEBUG flag without reconfiguring global handlers.
        logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

        self._store = store
        self._llm = llm
        self._lock = lock

    async def append_and_complete(self, user_id: str, message: str) -> List[ChatTurn]:
        """
        Append `message` as a user turn, get the AI reply, and persist both turns.
        Returns the full conversation, newest last.
        Nothing is persisted when the AI call or the write fails.
        """
        await self._acquire(user_id)
        try:
            user = await self._load(user_id)
            history = list(user.chats)

            try:
                reply = await self._llm.complete(history=history, message=message)
            except UpstreamError:
                logger.warning("AI reply failed for user %s; conversation left unchanged", user_id)
                raise

            new_turns = [
                ChatTurn(role="user", content=message),
                ChatTurn(role="assistant", content=reply),
            ]
            await self._store.append_turns(user_id, new_turns)
            logger.info("Appended turns for user %s (%d total)", user_id, len(history) + 2)
            return history + new_turns
        finally:
            await self._release(user_id)

    async def list_turns(self, user_id: str, caller_id: str) -> List[ChatTurn]:
        """Return the stored conversation of `user_id`, which must be the caller."""
        self._check_identity(user_id, caller_id)
        user = await self._load(user_id)
        logger.debug("Listed %d turns for user %s", len(user.chats), user_id)
        return list(user.chats)

    async def clear_turns(self, user_id: str, caller_id: str) -> List[ChatTurn]:
        """Empty the stored conversation of `user_id`, which must be the caller."""
        self._check_identity(user_id, caller_id)
        await self._acquire(user_id)
        try:
            if not await self._store.user_exists(user_id):
                logger.info("Unknown user %s", user_id)
                raise NotFoundError()
            await self._store.clear_turns(user_id)
        finally:
            await self._release(user_id)
        logger.info("Cleared conversation for user %s", user_id)
        return []

    async def _load(self, user_id: str) -> UserRecord:
        user = await self._store.get_user(user_id)
        if user is None:
            logger.info("Unknown user %s", user_id)
            raise NotFoundError()
        return user

    @staticmethod
    def _check_identity(user_id: str, caller_id: str) -> None:
        if user_id != caller_id:
            logger.warning("Caller %s attempted to access user %s", caller_id, user_id)
            raise ForbiddenError()

    async def _acquire(self, user_id: str) -> None:
        if self._lock is None:
            return
        if await self._lock.acquire(user_id):
            return
        await asyncio.sleep(LOCK_RETRY_DELAY_SECONDS)
        if not await self._lock.acquire(user_id):
            raise ConflictError()

    async def _release(self, user_id: str) -> None:
        if self._lock is not None:
            await self._lock.release(user_id)
