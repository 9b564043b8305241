# app/ai.py
import logging
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from openai import APIStatusError

import config
from policy import REFUSAL_TEXT
from prompting import build_outbound_messages, is_in_scope, last_user_text

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response."

def extract_reply(payload: Any) -> str:
    """Pull the reply text out of a chat-completions body.

    Providers behind the router do not all answer in the same shape, so try
    ``choices[0].message.content``, then the legacy ``choices[0].text``, then
    an ``error`` object, and finally give up with "No response.".
    """
    if not isinstance(payload, dict):
        return NO_RESPONSE

    choices = payload.get("choices")
    first = choices[0] if isinstance(choices, list) and choices else None
    if isinstance(first, dict):
        message = first.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str) and content.strip():
            return content.strip()
        text = first.get("text")
        if isinstance(text, str) and text.strip():
            return text.strip()

    error = payload.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else None
        return f"Error: {message or error}"

    return NO_RESPONSE

def _fetch_latest_temperatures(limit: int) -> List[Dict[str, Any]]:
    return config.get_sensor_store().latest_temperatures(limit)

async def forward_completion(messages: List[Dict[str, Any]], origin: Optional[str] = None) -> str:
    client = config.get_completion_client()

    try:
        raw = await client.chat.completions.with_raw_response.create(
            model=config.OPENROUTER_MODEL,
            messages=messages,
            extra_headers={
                "HTTP-Referer": origin or config.SITE_URL,
                "X-Title": config.APP_TITLE,
            },
        )
        payload = raw.http_response.json()
    except APIStatusError as e:
        # error bodies go through the same extraction as successful ones
        logger.info("Completion service answered %s", e.status_code)
        body = e.body or {"message": e.message}
        if isinstance(body, str):
            # gateway pages and other non-JSON bodies stay out of the reply
            logger.warning("Non-JSON error body from completion service: %.200s", body)
            body = {"message": f"completion service returned HTTP {e.status_code}"}
        payload = {"error": body}

    return extract_reply(payload)

async def ask_assistant(messages, origin: Optional[str] = None) -> str:
    """Scope check, prompt assembly and completion for one conversation."""
    if not is_in_scope(last_user_text(messages)):
        return REFUSAL_TEXT

    outbound = await run_in_threadpool(
        build_outbound_messages, messages, _fetch_latest_temperatures
    )
    return await forward_completion(outbound, origin=origin)

async def ask_for_health_assessment(prompt: str, origin: Optional[str] = None) -> str:
    return await ask_assistant([{"role": "user", "content": prompt}], origin=origin)
