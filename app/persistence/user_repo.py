"""
Provide repository functions for reading users and managing their chats.
This layer isolates SQL details from the store and services.
Functions flush but never commit; transaction boundaries belong to the caller.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.persistence.database import Chat, User


async def get_user(session: AsyncSession, user_id: str) -> Optional[User]:
    """Return the user row or None."""
    return await session.get(User, user_id)


async def get_chats(session: AsyncSession, user_id: str) -> List[Chat]:
    """
    Return all chats of a user in conversation order (oldest first).
    """
    stmt = (
        select(Chat)
        .where(Chat.user_id == user_id)
        .order_by(Chat.position.asc())
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def next_position(session: AsyncSession, user_id: str) -> int:
    stmt = select(func.coalesce(func.max(Chat.position), -1)).where(Chat.user_id == user_id)
    res = await session.execute(stmt)
    return int(res.scalar_one()) + 1


async def add_chats(
    session: AsyncSession,
    user_id: str,
    items: Sequence[tuple[str, str, str]],
) -> List[Chat]:
    """
    Append chats after the user's last one: items = [(chat_id, role, content), ...]
    Returns the list of pending Chat instances.
    """
    start = await next_position(session, user_id)
    objs: List[Chat] = [
        Chat(id=i, user_id=user_id, position=start + offset, role=r, content=c)
        for offset, (i, r, c) in enumerate(items)
    ]
    session.add_all(objs)
    await session.flush()
    return objs


async def delete_chats(session: AsyncSession, user_id: str) -> int:
    """
    Delete every chat of a user. Returns the number of rows removed.
    """
    res = await session.execute(delete(Chat).where(Chat.user_id == user_id))
    return int(res.rowcount or 0)
