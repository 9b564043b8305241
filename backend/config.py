# app/config.py
import os
from functools import lru_cache

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI
from supabase import create_client

from logging_config import setup_logging
from sensors import SensorStore

load_dotenv()

OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "meta-llama/llama-3.1-8b-instruct")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")

SITE_URL = os.getenv("SITE_URL", "https://lifesense.vercel.app")
APP_TITLE = os.getenv("APP_TITLE", "LifeSense")

# no fallback literals for the store credentials
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")

DATA_FILE = os.getenv("LIFESENSE_DATA_FILE", "data.json")

PATIENT_PROFILE = os.getenv(
    "PATIENT_PROFILE",
    "Patient profile: name=Tufayl, age=63, height_cm=172. Use only for health-related answers.",
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class ConfigError(RuntimeError):
    """Raised when a required setting is missing."""


def build_completion_client(api_key: str, base_url: str, http_client=None) -> AsyncOpenAI:
    # one upstream request per user turn, the SDK would otherwise retry twice
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        max_retries=0,
        http_client=http_client,
    )


@lru_cache(maxsize=4)
def _completion_client(api_key: str, base_url: str) -> AsyncOpenAI:
    return build_completion_client(api_key, base_url)


def get_completion_client() -> AsyncOpenAI:
    if not OPENROUTER_API_KEY:
        raise ConfigError("OPENROUTER_API_KEY not configured")
    return _completion_client(OPENROUTER_API_KEY, OPENROUTER_BASE_URL)


@lru_cache(maxsize=4)
def _supabase_client(url: str, key: str):
    return create_client(url, key)


def get_sensor_store():
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise ConfigError("SUPABASE_URL / SUPABASE_ANON_KEY not configured")
    return SensorStore(_supabase_client(SUPABASE_URL, SUPABASE_ANON_KEY))


def create_app() -> FastAPI:
    setup_logging(LOG_LEVEL)
    app = FastAPI(title=f"{APP_TITLE} API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app
