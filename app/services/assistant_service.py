"""
Assistant Service
Workshop descriptions and the chat assistant, via LiteLLM
"""

import logging
from typing import List, Optional

from litellm import acompletion

from app.config import settings
from app.schemas.assistant import ChatTurn
from app.schemas.common import Organization

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description generated."
DESCRIPTION_FAILED = "Could not generate description."
EMPTY_REPLY = "I'm sorry, I'm having trouble processing that."
OFFLINE_REPLY = "I'm offline right now. Try again later!"


def persona_instruction() -> str:
    return (
        f"You are {settings.ASSISTANT_NAME}, the AI assistant for {settings.APP_NAME}. "
        "You help students manage workshops and awards. Be helpful, concise, and professional."
    )


def build_chat_messages(history: List[ChatTurn], message: str) -> List[dict]:
    """
    Convert stored turns into chat messages

    Turns with no text are dropped and "model" turns become "assistant".
    """
    messages = [{"role": "system", "content": persona_instruction()}]
    for turn in history:
        if not turn.text or not turn.text.strip():
            continue
        role = "assistant" if turn.role == "model" else "user"
        messages.append({"role": role, "content": turn.text})
    messages.append({"role": "user", "content": message})
    return messages


def _reply_text(response) -> Optional[str]:
    choices = getattr(response, "choices", None)
    if not choices:
        return None
    content = choices[0].message.content
    return content.strip() if content else None


class AssistantService:
    """Best-effort text generation; never raises"""

    @staticmethod
    async def _complete(messages: List[dict], temperature: Optional[float] = None):
        kwargs = {
            "model": settings.LLM_MODEL,
            "messages": messages,
            "temperature": settings.LLM_TEMPERATURE if temperature is None else temperature,
        }
        if settings.LLM_API_KEY:
            kwargs["api_key"] = settings.LLM_API_KEY
        return await acompletion(**kwargs)

    @staticmethod
    async def generate_workshop_description(title: str, organization: Organization) -> str:
        prompt = (
            f'Write a professional, engaging, max 2 sentences description for a workshop: '
            f'"{title}" by "{organization.value}". Focus on student growth.'
        )
        try:
            response = await AssistantService._complete([{"role": "user", "content": prompt}])
        except Exception as e:
            logger.error("Description generation failed: %s", e)
            return DESCRIPTION_FAILED
        return _reply_text(response) or NO_DESCRIPTION

    @staticmethod
    async def generate_chat_response(history: List[ChatTurn], message: str) -> str:
        try:
            response = await AssistantService._complete(build_chat_messages(history, message))
        except Exception as e:
            logger.error("Chat completion failed: %s", e)
            return OFFLINE_REPLY
        return _reply_text(response) or EMPTY_REPLY


# Create singleton instance
assistant_service = AssistantService()
