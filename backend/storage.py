# app/storage.py
import json
import os
from datetime import datetime
from typing import Dict, Any, List, Optional

import config
from policy import MAX_HISTORY, system_seed

PROFILE_KEY = "profile"
THEME_KEY = "theme"
FONT_SIZE_KEY = "fontSize"
CHAT_KEY = "lifesense.chat.history"

DEFAULT_THEME = "light"
DEFAULT_FONT_SIZE = 16

def _parse_iso_to_datetime(ts: str | None) -> datetime:
    if not ts:
        return datetime.min
    try:
        ts = str(ts)
        if ts.endswith("Z"):
            ts = ts[:-1] + "+00:00"
        return datetime.fromisoformat(ts)
    except Exception:
        return datetime.min

def _data_file() -> str:
    return config.DATA_FILE

def load_data() -> Dict[str, Any]:
    path = _data_file()
    if not os.path.exists(path):
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        # unreadable state behaves like a fresh browser profile
        return {}

    if not isinstance(data, dict):
        return {}
    return data

def save_data(data: Dict[str, Any]) -> None:
    path = _data_file()
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

def get_item(key: str, default: Any = None) -> Any:
    return load_data().get(key, default)

def set_item(key: str, value: Any) -> None:
    data = load_data()
    data[key] = value
    save_data(data)

def get_profile() -> Optional[Dict[str, Any]]:
    profile = get_item(PROFILE_KEY)
    return profile if isinstance(profile, dict) else None

def save_profile(name, age, height, weight) -> Dict[str, Any]:
    profile = {"name": name, "age": age, "height": height, "weight": weight}
    set_item(PROFILE_KEY, profile)
    return profile

def get_settings() -> Dict[str, Any]:
    data = load_data()
    return {
        "theme": data.get(THEME_KEY) or DEFAULT_THEME,
        "fontSize": data.get(FONT_SIZE_KEY) or DEFAULT_FONT_SIZE,
    }

def save_settings(theme: str | None = None, font_size: int | None = None) -> Dict[str, Any]:
    data = load_data()
    if theme is not None:
        data[THEME_KEY] = theme
    if font_size is not None:
        data[FONT_SIZE_KEY] = font_size
    save_data(data)
    return get_settings()

def _seeded_conversation() -> List[Dict[str, Any]]:
    return [{"role": "system", "content": system_seed()}]

def load_conversation() -> List[Dict[str, Any]]:
    convo = get_item(CHAT_KEY)
    if not isinstance(convo, list) or not convo:
        convo = _seeded_conversation()
        set_item(CHAT_KEY, convo)
        return convo

    convo = [m for m in convo if isinstance(m, dict)]
    # the saved tail can lose the seed once the cap kicks in
    if not convo or convo[0].get("role") != "system":
        convo = _seeded_conversation() + convo
    return convo

def save_conversation(convo: List[Dict[str, Any]]) -> None:
    set_item(CHAT_KEY, convo[-MAX_HISTORY:])

def reset_conversation() -> List[Dict[str, Any]]:
    convo = _seeded_conversation()
    save_conversation(convo)
    return convo
