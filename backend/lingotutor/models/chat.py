from typing import Any

from pydantic import BaseModel


class ChatRequest(BaseModel):
    prompt: str


class ChatResponse(BaseModel):
    reply: str
    message: dict[str, Any]  # raw messages-API response
