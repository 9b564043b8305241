import pytest

from policy import MAX_HISTORY, system_seed
from prompting import (
    build_outbound_messages,
    enrich_with_temperatures,
    ensure_system_seed,
    format_temperature_readings,
    is_in_scope,
    last_user_text,
    mentions_temperature,
    sanitize_history,
)

from conftest import TEMPERATURE_ROWS


def user(text):
    return {"role": "user", "content": text}


def assistant(text):
    return {"role": "assistant", "content": text}


# --- scope ---

@pytest.mark.parametrize(
    "text",
    [
        "How much WATER should I drink?",
        "I have anxiety at night",
        "tips for better sleep",
        "what is a normal heart rate",
        "my Blood Pressure is 140/90",
    ],
)
def test_in_scope_texts(text):
    assert is_in_scope(text) is True


@pytest.mark.parametrize(
    "text",
    [
        "What's the capital of France",
        "write me a poem about cats",
        "",
    ],
)
def test_out_of_scope_texts(text):
    assert is_in_scope(text) is False


def test_scope_is_plain_substring_matching():
    # "anxious" is not a keyword and nothing else in the sentence matches
    assert is_in_scope("I feel anxious at night") is False
    # ...while any embedded keyword counts, even inside another word
    assert is_in_scope("Who won the marathon run?") is True


def test_last_user_text_skips_non_string_content():
    messages = [
        user("first"),
        assistant("reply"),
        {"role": "user", "content": {"parts": ["x"]}},
    ]
    assert last_user_text(messages) == "first"
    assert last_user_text("not a list") == ""
    assert last_user_text([]) == ""


# --- system seed ---

def test_seed_is_prepended_once():
    messages = [user("hello"), assistant("hi"), user("sleep tips?")]
    seeded = ensure_system_seed(messages)

    assert len(seeded) == len(messages) + 1
    assert seeded[0] == {"role": "system", "content": system_seed()}
    assert seeded[1:] == messages
    # input untouched
    assert messages[0] == user("hello")


def test_seed_is_idempotent():
    seeded = ensure_system_seed([user("hello")])
    assert ensure_system_seed(seeded) == seeded

    custom = [{"role": "system", "content": "custom"}, user("x")]
    assert ensure_system_seed(custom) is custom


def test_seed_for_empty_list():
    assert ensure_system_seed([]) == [{"role": "system", "content": system_seed()}]


def test_seed_contains_policy_and_profile():
    seed = system_seed("Patient profile: name=Test.")
    assert "health-only assistant" in seed
    assert "suicide helpline" in seed
    assert seed.endswith("\n\nPatient profile: name=Test.")


# --- history ---

def test_sanitize_drops_unknown_roles_and_junk():
    messages = [
        user("a"),
        {"role": "tool", "content": "x"},
        "garbage",
        None,
        {"content": "no role"},
        assistant("b"),
    ]
    assert sanitize_history(messages) == [user("a"), assistant("b")]


def test_sanitize_keeps_the_last_twenty():
    messages = []
    for i in range(30):
        messages.append(user(f"q{i}"))
        messages.append({"role": "function", "content": "ignored"})

    result = sanitize_history(messages)
    filtered = [m for m in messages if m["role"] == "user"]

    assert len(result) == MAX_HISTORY
    assert result == filtered[-MAX_HISTORY:]


def test_short_history_is_not_padded():
    assert sanitize_history([user("a")]) == [user("a")]
    assert sanitize_history(None) == []


# --- temperature enrichment ---

def test_mentions_temperature():
    assert mentions_temperature("Do I have a FEVER?")
    assert mentions_temperature("what's my body temp")
    assert not mentions_temperature("how did I sleep")


def test_readings_are_formatted_oldest_first():
    block = format_temperature_readings(TEMPERATURE_ROWS)
    lines = block.split("\n")

    assert lines == [
        "2025-01-01T10:00:00.000Z -> 36.5 °C",
        "2025-01-01T10:05:00.000Z -> 36.7 °C",
        "2025-01-01T10:10:00.000Z -> 36.6 °C",
    ]


def test_readings_format_edge_cases():
    rows = [
        {"degree": 37.0, "time": "2025-01-01T11:00:00+02:00"},
        {"degree": 36, "time": "not a date"},
    ]
    assert format_temperature_readings(rows).split("\n") == [
        "not a date -> 36 °C",
        "2025-01-01T09:00:00.000Z -> 37 °C",
    ]
    assert format_temperature_readings([]) is None


def test_enrichment_prepends_context_for_temperature_questions():
    messages = ensure_system_seed([user("What is my temperature trend?")])
    calls = []

    def fetch(limit):
        calls.append(limit)
        return TEMPERATURE_ROWS

    enriched = enrich_with_temperatures(messages, fetch)

    assert calls == [15]
    assert len(enriched) == len(messages) + 1
    assert enriched[1:] == messages
    context = enriched[0]
    assert context["role"] == "system"
    assert context["content"].startswith("Recent temperature readings (newest last):\n")
    assert context["content"].index("10:00:00") < context["content"].index("10:10:00")
    assert "Guidance: Refer to these readings" in context["content"]


def test_enrichment_skipped_without_temperature_terms():
    messages = [user("How much protein do I need?")]

    def fetch(limit):
        raise AssertionError("store should not be queried")

    assert enrich_with_temperatures(messages, fetch) is messages


def test_enrichment_is_a_noop_when_store_fails(caplog):
    messages = ensure_system_seed([user("do I have a fever?")])

    def fetch(limit):
        raise ConnectionError("store unreachable")

    assert enrich_with_temperatures(messages, fetch) == messages
    assert "Temperature context skipped" in caplog.text


def test_enrichment_is_a_noop_when_store_is_empty():
    messages = [user("temperature?")]
    assert enrich_with_temperatures(messages, lambda limit: []) == messages


def test_outbound_messages_sanitize_then_seed_then_enrich():
    history = [user(f"q{i}") for i in range(25)] + [user("any fever lately?")]
    outbound = build_outbound_messages(history, lambda limit: TEMPERATURE_ROWS)

    assert outbound[0]["content"].startswith("Recent temperature readings")
    assert outbound[1] == {"role": "system", "content": system_seed()}
    assert outbound[2:] == history[-MAX_HISTORY:]
