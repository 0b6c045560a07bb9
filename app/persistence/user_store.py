"""
User store used by the conversation service.

`UserStore` is the narrow interface the service depends on; `SqlUserStore`
implements it over an AsyncSession. Every mutation is committed in a single
transaction, so a failed write leaves the stored conversation untouched.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceError
from app.models.schemas import ChatTurn, UserRecord
from app.persistence import user_repo

logger = logging.getLogger("user_store")


class UserStore(Protocol):
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    async def user_exists(self, user_id: str) -> bool:
        ...

    async def append_turns(self, user_id: str, turns: Sequence[ChatTurn]) -> None:
        ...

    async def clear_turns(self, user_id: str) -> None:
        ...


class SqlUserStore:
    """
    Wrap an AsyncSession and expose the operations needed by the service.
    The store does not own the session's lifecycle; the request dependency does.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        """
        Load a user and its chats oldest first.
        Return None if the user does not exist.
        """
        try:
            user = await user_repo.get_user(self._session, user_id)
            if user is None:
                return None
            rows = await user_repo.get_chats(self._session, user_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load user %s", user_id)
            raise PersistenceError("Failed to load user") from exc

        chats = [ChatTurn(id=r.id, role=r.role, content=r.content) for r in rows]
        return UserRecord(id=user.id, name=user.name, email=user.email, chats=chats)

    async def user_exists(self, user_id: str) -> bool:
        """Check the user row only, without loading chats."""
        try:
            return await user_repo.get_user(self._session, user_id) is not None
        except SQLAlchemyError as exc:
            logger.exception("Failed to look up user %s", user_id)
            raise PersistenceError("Failed to load user") from exc

    async def append_turns(self, user_id: str, turns: Sequence[ChatTurn]) -> None:
        """Append all turns atomically, after the user's existing ones."""
        items = [(t.id, t.role, t.content) for t in turns]
        try:
            await user_repo.add_chats(self._session, user_id, items)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Failed to append %d chats for user %s", len(items), user_id)
            raise PersistenceError() from exc

    async def clear_turns(self, user_id: str) -> None:
        """Remove every turn of the user."""
        try:
            removed = await user_repo.delete_chats(self._session, user_id)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.exception("Failed to clear chats for user %s", user_id)
            raise PersistenceError("Failed to clear conversation") from exc
        logger.debug("Cleared %d chats for user %s", removed, user_id)
