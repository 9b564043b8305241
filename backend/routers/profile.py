# app/routers/profile.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException

from models import Profile, SettingsUpdate
from storage import get_profile, get_settings, save_profile, save_settings

router = APIRouter(tags=["profile"])

def profile_display(profile: Optional[Dict[str, Any]]) -> Dict[str, str]:
    if not profile or not profile.get("name"):
        return {
            "name": "-",
            "age": "-",
            "height": "-",
            "weight": "-",
            "welcome": "Welcome! Please complete your profile to see personalized information.",
        }
    weight = profile.get("weight")
    return {
        "name": str(profile["name"]),
        "age": f"{profile.get('age')} years",
        "height": f"{profile.get('height')} cm",
        "weight": f"{weight} kg" if weight else "-",
        "welcome": f"Welcome back, {profile['name']}! Here's your health overview.",
    }

@router.get("/api/profile")
def read_profile():
    profile = get_profile()
    return {"profile": profile, "display": profile_display(profile)}

@router.put("/api/profile")
def update_profile(body: Profile):
    name = body.name.strip()
    if not (name and body.age and body.height and body.weight):
        raise HTTPException(status_code=400, detail="Name, age, height and weight are required")

    profile = save_profile(name, body.age, body.height, body.weight)
    return {"profile": profile, "display": profile_display(profile)}

@router.get("/api/settings")
def read_settings():
    return get_settings()

@router.put("/api/settings")
def update_settings(body: SettingsUpdate):
    return save_settings(theme=body.theme, font_size=body.fontSize)
