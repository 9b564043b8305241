# app/routers/chat.py
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ai import ask_assistant
from config import ConfigError
from conversation import reset, send_message, visible_messages
from models import ChatReply, ChatRequest, ConversationTurn
from policy import ALLOWED_TOPICS, GREETING, REFUSAL_TEXT
from storage import load_conversation

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

def _origin(request: Request) -> Optional[str]:
    return request.headers.get("origin") or request.headers.get("referer")

async def _read_messages(request: Request) -> list:
    # any body that is not an object holding a list counts as no messages
    try:
        body = await request.json()
    except ValueError:
        return []
    if not isinstance(body, dict):
        return []
    req = ChatRequest.model_validate(body)
    return req.messages if isinstance(req.messages, list) else []

@router.post("/api/chat", response_model=ChatReply)
async def chat(request: Request):
    messages = await _read_messages(request)

    try:
        reply = await ask_assistant(messages, origin=_origin(request))
    except ConfigError as e:
        logger.error("Chat API misconfigured: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e)})
    except Exception as e:
        logger.exception("Chat API error")
        return JSONResponse(status_code=500, content={"error": str(e)})

    return {"reply": reply}

@router.get("/api/chat/config")
def chat_config():
    return {
        "refusal": REFUSAL_TEXT,
        "greeting": GREETING,
        "topics": ALLOWED_TOPICS,
    }

@router.get("/api/conversation")
def get_conversation():
    return {
        "greeting": GREETING,
        "messages": visible_messages(load_conversation()),
    }

@router.post("/api/conversation")
async def post_conversation(turn: ConversationTurn, request: Request):
    text = turn.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message text is empty")

    reply = await send_message(text, origin=_origin(request))
    convo = await run_in_threadpool(load_conversation)
    return {
        "reply": reply,
        "messages": visible_messages(convo),
    }

@router.delete("/api/conversation")
def delete_conversation():
    reset()
    return {"greeting": GREETING, "messages": []}
