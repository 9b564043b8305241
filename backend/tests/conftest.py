"""
Pytest configuration and fixtures

Supabase and OpenRouter are never contacted: ``fake_store`` and
``fake_llm`` replace ``config.get_sensor_store`` / ``config.get_completion_client``.
"""
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

import config
from charts import TemperaturePanel, VitalsPanel


TEMPERATURE_ROWS = [
    # newest first, the way the store returns them
    {"degree": 36.6, "time": "2025-01-01T10:10:00Z"},
    {"degree": 36.7, "time": "2025-01-01T10:05:00Z"},
    {"degree": 36.5, "time": "2025-01-01T10:00:00Z"},
]

VITALS_ROWS = [
    {"bpm": 72, "spo2": 98, "created_at": "2025-01-01T10:10:00Z"},
    {"bpm": None, "spo2": 97, "created_at": "2025-01-01T10:05:00Z"},
    {"bpm": 70, "spo2": None, "created_at": "2025-01-01T10:00:00Z"},
]


class FakeStore:
    def __init__(self, temperatures=None, vitals=None, error=None):
        self.temperature_rows = list(TEMPERATURE_ROWS if temperatures is None else temperatures)
        self.vitals_rows = list(VITALS_ROWS if vitals is None else vitals)
        self.error = error
        self.calls = []

    def _check(self, name, *args):
        self.calls.append((name, args))
        if self.error:
            raise self.error

    def latest_temperatures(self, limit=15):
        self._check("latest_temperatures", limit)
        return self.temperature_rows[:limit]

    def temperatures(self, start=None, end=None, limit=None):
        self._check("temperatures", start, end)
        return list(reversed(self.temperature_rows))

    def latest_vitals(self, limit=10):
        self._check("latest_vitals", limit)
        return self.vitals_rows[:limit]

    def vitals_series(self, limit=150):
        self._check("vitals_series", limit)
        return list(reversed(self.vitals_rows[:limit]))


class FakeCompletions:
    """Stands in for ``AsyncOpenAI().chat.completions.with_raw_response``."""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else {
            "choices": [{"message": {"role": "assistant", "content": "  Stay hydrated.  "}}]
        }
        self.error = error
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(http_response=SimpleNamespace(json=lambda: self.payload))


def make_llm_client(completions):
    return SimpleNamespace(
        chat=SimpleNamespace(
            completions=SimpleNamespace(with_raw_response=completions)
        )
    )


@pytest.fixture(autouse=True)
def state_file(tmp_path, monkeypatch):
    path = tmp_path / "data.json"
    monkeypatch.setattr(config, "DATA_FILE", str(path))
    return path


@pytest.fixture
def fake_store(monkeypatch):
    store = FakeStore()
    monkeypatch.setattr(config, "get_sensor_store", lambda: store)
    return store


@pytest.fixture
def fake_llm(monkeypatch):
    completions = FakeCompletions()
    monkeypatch.setattr(config, "OPENROUTER_API_KEY", "sk-or-test")
    monkeypatch.setattr(config, "get_completion_client", lambda: make_llm_client(completions))
    return completions


@pytest.fixture
def client():
    from main import app

    app.state.temperature_panel = TemperaturePanel()
    app.state.vitals_panel = VitalsPanel()
    return TestClient(app)
