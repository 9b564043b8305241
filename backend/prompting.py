# app/prompting.py
"""
Assembly of the message list sent to the completion service.

The proxy runs these steps in order:

1. ``is_in_scope(last_user_text(messages))`` decides whether the request
   reaches the model at all.
2. ``sanitize_history`` drops entries with unknown roles and keeps the last
   ``MAX_HISTORY``.
3. ``ensure_system_seed`` puts the policy + profile prompt in front.
4. ``enrich_with_temperatures`` adds recent sensor readings when the user is
   asking about temperature.

All of them work on plain ``{"role", "content"}`` dicts and never mutate
their input.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from policy import (
    ALLOWED_TOPICS,
    MAX_HISTORY,
    TEMPERATURE_CONTEXT_LIMIT,
    TEMPERATURE_TERMS,
    system_seed,
)
from storage import _parse_iso_to_datetime

logger = logging.getLogger(__name__)

Message = Dict[str, Any]

ALLOWED_ROLES = ("system", "user", "assistant")


def last_user_text(messages) -> str:
    if not isinstance(messages, list):
        return ""
    for m in reversed(messages):
        if isinstance(m, dict) and m.get("role") == "user" and isinstance(m.get("content"), str):
            return m["content"]
    return ""


def _contains_any(text: str, terms: List[str]) -> bool:
    q = (text or "").lower()
    return any(term in q for term in terms)


def is_in_scope(text: str) -> bool:
    return _contains_any(text, ALLOWED_TOPICS)


def mentions_temperature(text: str) -> bool:
    return _contains_any(text, TEMPERATURE_TERMS)


def ensure_system_seed(messages: List[Message], seed: Optional[str] = None) -> List[Message]:
    messages = messages or []
    if not messages or messages[0].get("role") != "system":
        return [{"role": "system", "content": seed or system_seed()}, *messages]
    return messages


def sanitize_history(messages, limit: int = MAX_HISTORY) -> List[Message]:
    kept = [
        m for m in (messages or [])
        if isinstance(m, dict) and m.get("role") in ALLOWED_ROLES
    ]
    return kept[-limit:]


def _iso_utc(value: Any) -> str:
    dt = _parse_iso_to_datetime(value)
    if dt == datetime.min:
        return str(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_temperature_readings(rows: List[Dict[str, Any]]) -> Optional[str]:
    """Newest-first ``temper`` rows -> one ``<time> -> <degree> °C`` line each, oldest first."""
    if not isinstance(rows, list) or not rows:
        return None
    chron = list(reversed(rows))
    return "\n".join(
        f"{_iso_utc(row.get('time'))} -> {_format_number(row.get('degree'))} °C"
        for row in chron
    )


def temperature_context(formatted: str) -> str:
    return (
        f"Recent temperature readings (newest last):\n{formatted}\n\n"
        "Guidance: Refer to these readings when asked about temperature. Interpret trends briefly."
    )


def enrich_with_temperatures(
    messages: List[Message],
    fetch_readings: Callable[[int], List[Dict[str, Any]]],
    limit: int = TEMPERATURE_CONTEXT_LIMIT,
) -> List[Message]:
    if not mentions_temperature(last_user_text(messages)):
        return messages

    try:
        formatted = format_temperature_readings(fetch_readings(limit))
    except Exception as e:
        logger.warning("Temperature context skipped: %s", e)
        return messages

    if not formatted:
        return messages
    return [{"role": "system", "content": temperature_context(formatted)}, *messages]


def build_outbound_messages(
    messages,
    fetch_readings: Callable[[int], List[Dict[str, Any]]],
) -> List[Message]:
    """Sanitize, seed and (maybe) enrich an in-scope conversation."""
    prepared = ensure_system_seed(sanitize_history(messages))
    return enrich_with_temperatures(prepared, fetch_readings)
