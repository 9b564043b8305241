# app/conversation.py
"""Chat widget conversation kept in the dashboard state file."""
import logging
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool

from ai import NO_RESPONSE, ask_assistant
from policy import REFUSAL_TEXT
from prompting import is_in_scope
from storage import load_conversation, reset_conversation, save_conversation

logger = logging.getLogger(__name__)

UNAVAILABLE_TEXT = "Assistant is unavailable right now. Please try again later."

def visible_messages(convo: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [m for m in convo if m.get("role") != "system"]

async def send_message(text: str, origin: Optional[str] = None) -> str:
    convo = await run_in_threadpool(load_conversation)
    convo.append({"role": "user", "content": text})

    # refused locally, the proxy never sees it
    if not is_in_scope(text):
        convo.append({"role": "assistant", "content": REFUSAL_TEXT})
        await run_in_threadpool(save_conversation, convo)
        return REFUSAL_TEXT

    await run_in_threadpool(save_conversation, convo)

    try:
        reply = (await ask_assistant(convo, origin=origin) or "").strip() or NO_RESPONSE
    except Exception:
        logger.exception("Assistant call failed")
        reply = UNAVAILABLE_TEXT

    convo.append({"role": "assistant", "content": reply})
    await run_in_threadpool(save_conversation, convo)
    return reply

def reset() -> List[Dict[str, Any]]:
    return reset_conversation()
