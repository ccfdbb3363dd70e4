# backend/kurdmed/api/routes/chat_routes.py

import json
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse

from kurdmed.api.deps import get_conversations, get_current_user
from kurdmed.models import ChatMessageRequest, ChatStartRequest, ChatTranscript, User
from kurdmed.services.chat_service import ConversationStore

router = APIRouter(prefix="/chat", tags=["chat"])


def _line(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False) + "\n"


@router.post("/start")
def start_chat(
    body: Optional[ChatStartRequest] = None,
    conversations: ConversationStore = Depends(get_conversations),
    user: Optional[User] = Depends(get_current_user),
):
    """Open a fresh conversation seeded with the localized greeting."""
    language = body.language if body else "en"
    session_id = conversations.create(language)
    conversation = conversations.get(session_id)
    return JSONResponse(
        {
            "session_id": session_id,
            "language": language,
            "turns": [turn.model_dump() for turn in conversation.turns],
        },
        headers={"X-Session-Id": session_id},
    )


@router.post("/{session_id}/messages")
def send_chat_message(
    session_id: str,
    body: ChatMessageRequest,
    conversations: ConversationStore = Depends(get_conversations),
    user: Optional[User] = Depends(get_current_user),
):
    """
    Stream the assistant reply as NDJSON.

    Every ``text`` line carries the whole reply accumulated so far; the
    stream always finishes with an ``end`` line.
    """
    conversation = conversations.get(session_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Chat session not found")

    try:
        replies = conversation.send(body.message, body.language)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    def generate():
        for text in replies:
            yield _line({"type": "text", "content": text})
        yield _line({"type": "end"})

    return StreamingResponse(
        generate(),
        media_type="application/x-ndjson",
        headers={"X-Session-Id": session_id},
    )


@router.get("/{session_id}/messages", response_model=ChatTranscript)
def get_chat_messages(
    session_id: str,
    conversations: ConversationStore = Depends(get_conversations),
    user: Optional[User] = Depends(get_current_user),
):
    conversation = conversations.get(session_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return ChatTranscript(session_id=session_id, language=conversation.language, turns=conversation.turns)
