"""
Define SQLAlchemy ORM metadata and models.
This module does not create the engine nor the session; those are provided by app.core.dependencies.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Common declarative base for all ORM models."""
    pass


class User(Base):
    """
    Represent a registered user.
    Rows are created by the registration flow; this service only reads them
    and manages their chats.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    chats: Mapped[List["Chat"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Chat.position",
    )


class Chat(Base):
    """
    Represent a single turn in a user's conversation.
    `position` is the per-user insertion order and defines conversation order.
    """
    __tablename__ = "chats"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer())
    role: Mapped[str] = mapped_column(String(16))
    content: Mapped[str] = mapped_column(Text())
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    user: Mapped[User] = relationship(back_populates="chats")

    __table_args__ = (
        Index("ux_chats_user_position", "user_id", "position", unique=True),
    )


async def init_models(engine) -> None:
    """
    Create database tables based on ORM metadata.
    Intended for local/dev environments; use migrations in production.
    """
    from sqlalchemy.ext.asyncio import AsyncEngine
    if not isinstance(engine, AsyncEngine):
        raise TypeError("init_models expects an AsyncEngine")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
