"""
Provide application-wide dependency providers for database, lock and AI client.
Create a single async SQLAlchemy session factory, a Redis client and an OpenAI client.
Expose lightweight FastAPI dependencies to acquire/release resources per request.
"""

from typing import AsyncGenerator

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.persistence.redis_lock import RedisUserLock, UserLock
from app.persistence.user_store import SqlUserStore, UserStore
from app.services.conversation_service import ConversationService
from app.services.openai_client import ChatCompletionClient, OpenAIClient


# Database: build async engine and session factory once
DATABASE_URL = settings.database_url
engine = create_async_engine(
    DATABASE_URL,
    echo=settings.debug,
    pool_pre_ping=True,
    future=True,
)

SessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autoflush=False,
    class_=AsyncSession,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an AsyncSession tied to the request lifecycle.
    Ensure proper cleanup regardless of success or failure.
    """
    async with SessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


# Redis: create a single client instance (lazy) and reuse it
_redis_client: Redis | None = None


def get_redis() -> Redis:
    """
    Return a process-wide Redis client.
    Use decode_responses=True to work with str keys/values by default.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(
            settings.redis_url,
            decode_responses=True,
        )
    return _redis_client


# OpenAI: same lazy process-wide pattern
_chat_client: OpenAIClient | None = None


def get_chat_client() -> ChatCompletionClient:
    global _chat_client
    if _chat_client is None:
        _chat_client = OpenAIClient(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout_seconds=settings.openai_timeout_seconds,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
            system_prompt=settings.system_prompt,
        )
    return _chat_client


def get_user_store(db: AsyncSession = Depends(get_db)) -> UserStore:
    return SqlUserStore(db)


def get_user_lock(redis: Redis = Depends(get_redis)) -> UserLock:
    return RedisUserLock(redis, ttl_seconds=settings.lock_ttl_seconds)


def get_conversation_service(
    store: UserStore = Depends(get_user_store),
    lock: UserLock = Depends(get_user_lock),
    llm: ChatCompletionClient = Depends(get_chat_client),
) -> ConversationService:
    """Build the per-request service from its collaborators."""
    return ConversationService(store=store, llm=llm, lock=lock)
