"""
Assistant Routes
Generated workshop descriptions and the chat widget backend
"""

from fastapi import APIRouter, Depends

from app.auth import get_current_user, require_staff
from app.schemas.user import User
from app.schemas.assistant import DescriptionRequest, DescriptionResponse, ChatRequest, ChatResponse
from app.services.assistant_service import assistant_service

router = APIRouter()


@router.post("/workshop-description", response_model=DescriptionResponse)
async def generate_description(request: DescriptionRequest, current_user: User = Depends(require_staff)):
    """Draft a short workshop description (Officer or Admin)"""
    description = await assistant_service.generate_workshop_description(request.title, request.organization)
    return DescriptionResponse(description=description)


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, current_user: User = Depends(get_current_user)):
    """
    Reply to a chat message given the conversation so far

    Always answers 200; provider failures produce a fallback reply.
    """
    reply = await assistant_service.generate_chat_response(request.history, request.message)
    return ChatResponse(reply=reply)
