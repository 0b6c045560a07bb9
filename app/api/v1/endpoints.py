"""
Chat API endpoint definitions.

Routes for appending a message (with AI reply), listing and clearing the
caller's conversation. The caller id comes from upstream authentication.
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_conversation_service
from app.core.identity import get_caller_id
from app.models.schemas import ChatRequest, ChatsResponse, ErrorResponse
from app.services.conversation_service import ConversationService

_ERRORS = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter(prefix="/v1", tags=["chat"], responses=_ERRORS)


@router.post(
    "/chat/new",
    response_model=ChatsResponse,
    responses={502: {"model": ErrorResponse}},
)
async def generate_chat_completion(
    payload: ChatRequest,
    caller_id: str = Depends(get_caller_id),
    service: ConversationService = Depends(get_conversation_service),
) -> ChatsResponse:
    """
    Processes a chat turn.

    Workflow:
    - Loads the caller's conversation.
    - Sends the prior turns plus the new message to the AI service.
    - Persists the user turn and the reply together and returns the whole conversation.
    """
    chats = await service.append_and_complete(user_id=caller_id, message=payload.message)
    return ChatsResponse(chats=chats)


@router.get("/chat/all-chats", response_model=ChatsResponse)
async def get_all_chats(
    caller_id: str = Depends(get_caller_id),
    service: ConversationService = Depends(get_conversation_service),
) -> ChatsResponse:
    """Returns the caller's conversation, oldest first."""
    chats = await service.list_turns(user_id=caller_id, caller_id=caller_id)
    return ChatsResponse(chats=chats)


@router.delete("/chat/delete", response_model=ChatsResponse)
async def delete_all_chats(
    caller_id: str = Depends(get_caller_id),
    service: ConversationService = Depends(get_conversation_service),
) -> ChatsResponse:
    """Empties the caller's conversation."""
    chats = await service.clear_turns(user_id=caller_id, caller_id=caller_id)
    return ChatsResponse(chats=chats)


@router.get("/users/{user_id}/chats", response_model=ChatsResponse)
async def get_user_chats(
    user_id: str,
    caller_id: str = Depends(get_caller_id),
    service: ConversationService = Depends(get_conversation_service),
) -> ChatsResponse:
    """Returns the conversation of `user_id`; only the user themselves may read it."""
    chats = await service.list_turns(user_id=user_id, caller_id=caller_id)
    return ChatsResponse(chats=chats)


@router.delete("/users/{user_id}/chats", response_model=ChatsResponse)
async def delete_user_chats(
    user_id: str,
    caller_id: str = Depends(get_caller_id),
    service: ConversationService = Depends(get_conversation_service),
) -> ChatsResponse:
    chats = await service.clear_turns(user_id=user_id, caller_id=caller_id)
    return ChatsResponse(chats=chats)
