"""
Assistant Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import List, Literal
from app.schemas.common import Organization


class DescriptionRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    organization: Organization = Organization.GENERAL


class DescriptionResponse(BaseModel):
    description: str


class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str = ""


class ChatRequest(BaseModel):
    history: List[ChatTurn] = Field(default_factory=list)
    message: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    reply: str
