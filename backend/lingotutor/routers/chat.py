from fastapi import APIRouter, HTTPException

from lingotutor.models.chat import ChatRequest, ChatResponse
from lingotutor.services.tutor_service import (
    TutorResponseError,
    TutorUnavailableError,
    ask_tutor,
    reply_text,
)

router = APIRouter()


@router.post("/", response_model=ChatResponse)
async def chat(body: ChatRequest) -> ChatResponse:
    """Relay a tutor prompt to the upstream model."""
    if not body.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")
    try:
        message = await ask_tutor(body.prompt)
    except TutorUnavailableError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except TutorResponseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return ChatResponse(reply=reply_text(message), message=message)
