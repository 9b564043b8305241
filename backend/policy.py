# app/policy.py
"""
Assistant policy constants.

This is the only copy of the policy text, refusal string and topic list. The
chat proxy, the widget conversation and ``GET /api/chat/config`` all read
from here, so a front-end never has to embed its own version.

The topic list is a best-effort filter: plain case-insensitive substring
containment. It is easy to get around and is not a safety boundary; the
policy text in the system prompt does the real steering.
"""
from config import PATIENT_PROFILE

REFUSAL_TEXT = (
    "I'm not designed to answer that. "
    "I only help with health, mental health, sleep, diet, and activity."
)

SELF_HARM_TEXT = (
    "If you're in danger or thinking about harming yourself, "
    "contact local emergency services or a suicide helpline now."
)

GREETING = (
    "Hi! I'm LifeSense, your health assistant. "
    "I'm here to help you with your health-related queries."
)

HEALTH_POLICY = (
    "You are a health-only assistant. Scope: personal health safety, mental health, sleep, "
    "diet/nutrition/hydration, physical activity/fitness, and interpreting simple temperature readings.\n"
    "If the user asks for anything outside scope, reply exactly:\n"
    f'"{REFUSAL_TEXT}"\n'
    "Style: brief, factual, non-judgmental. No diagnosis or treatment instructions. "
    "Encourage professional care for concerning symptoms.\n"
    "If risk of self-harm or harm to others is expressed, say:\n"
    f'"{SELF_HARM_TEXT}"'
)

ALLOWED_TOPICS = [
    "health", "wellness", "safety", "temperature", "fever", "symptom", "risk",
    "mental", "anxiety", "stress", "depression", "mood", "therapy", "counseling", "mindfulness", "meditation",
    "sleep", "insomnia", "rest", "circadian", "nap",
    "diet", "food", "meal", "calorie", "nutrition", "hydrate", "hydration", "water", "protein", "carb", "fat", "vitamin",
    "exercise", "workout", "walk", "steps", "run", "yoga", "strength", "cardio", "fitness", "activity",
    "bmi", "weight", "height", "age", "heart rate", "pulse", "bp", "blood pressure",
]

TEMPERATURE_TERMS = ["temp", "temperature", "fever", "heat", "body temp"]

# outbound history cap
MAX_HISTORY = 20

TEMPERATURE_CONTEXT_LIMIT = 15


def system_seed(profile_blurb: str | None = None) -> str:
    return f"{HEALTH_POLICY}\n\n{profile_blurb or PATIENT_PROFILE}"
