# app/vitals.py
"""
Threshold labels and the plain-text health assessment for the dashboard.

All classifiers take the mean over the fetched window; there is no
smoothing or hysteresis. Boundaries:

=============  =================  ==================  ===========  ==========
metric         normal             elevated            high         low
=============  =================  ==================  ===========  ==========
temperature    30 .. 37.5         (37.5, 38.5]        > 38.5       < 30
heart rate     60 .. 100          (100, 120]          > 120        < 60
=============  =================  ==================  ===========  ==========

SpO2 uses normal (95..100), low [90, 95) and very low (< 90).
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple

from models import MetricSummary

def mean(values: Iterable[Any]) -> Optional[float]:
    nums = [v for v in values if v is not None]
    if not nums:
        return None
    return sum(nums) / len(nums)

def temperature_status(average: float) -> Tuple[str, str]:
    if 30 <= average <= 37.5:
        return "normal", "normal"
    if 37.5 < average <= 38.5:
        return "elevated", "slightly elevated"
    if average > 38.5:
        return "high", "high"
    return "low", "low"

def heart_rate_status(average: float) -> Tuple[str, str]:
    if 60 <= average <= 100:
        return "normal", "normal"
    if 100 < average <= 120:
        return "elevated", "slightly elevated"
    if average > 120:
        return "high", "high"
    return "low", "low"

def spo2_status(average: float) -> Tuple[str, str]:
    if 90 <= average < 95:
        return "low", "low"
    if average < 90:
        return "very low", "very low"
    return "normal", "normal"

def _summarize(rows: List[Dict[str, Any]], column: str, classify) -> MetricSummary:
    """``rows`` newest-first; latest is the newest non-null value."""
    values = [row.get(column) for row in rows or [] if row.get(column) is not None]
    average = mean(values)
    if average is None:
        return MetricSummary()
    status, status_text = classify(average)
    return MetricSummary(
        average=average,
        latest=values[0],
        status=status,
        status_text=status_text,
    )

def summarize_temperature(rows) -> MetricSummary:
    return _summarize(rows, "degree", temperature_status)

def summarize_heart_rate(rows) -> MetricSummary:
    return _summarize(rows, "bpm", heart_rate_status)

def summarize_spo2(rows) -> MetricSummary:
    return _summarize(rows, "spo2", spo2_status)

def patient_context(profile: Optional[Dict[str, Any]]) -> str:
    if not profile:
        return ""
    return (
        f"Patient: {profile.get('name') or 'User'}, Age: {profile.get('age') or 'N/A'}, "
        f"Height: {profile.get('height') or 'N/A'} cm, Weight: {profile.get('weight') or 'N/A'} kg. "
    )

def build_assessment_prompt(
    temp: MetricSummary,
    hr: MetricSummary,
    spo2: MetricSummary,
    context: str = "",
) -> str:
    prompt = context
    if temp.average is not None:
        prompt += (
            f"Temperature: average {temp.average:.2f}°C (latest {temp.latest:.2f}°C), "
            f"status: {temp.status_text}. "
        )
    if hr.average is not None:
        prompt += (
            f"Heart Rate: average {hr.average:.0f} bpm (latest {hr.latest:.0f} bpm), "
            f"status: {hr.status_text}. "
        )
    if spo2.average is not None:
        prompt += (
            f"SpO2: average {spo2.average:.1f}% (latest {spo2.latest:.1f}%), "
            f"status: {spo2.status_text}. "
        )
    prompt += (
        "Please provide a very brief, friendly, and professional health assessment in exactly "
        "2 short sentences covering all three metrics. Keep it concise and encouraging."
    )
    return prompt

def fallback_assessment(temp: MetricSummary, hr: MetricSummary, spo2: MetricSummary) -> str:
    parts = []
    if temp.average is not None:
        parts.append(f"Temperature is {temp.status_text} ({temp.average:.1f}°C)")
    if hr.average is not None:
        parts.append(f"heart rate is {hr.status_text} ({hr.average:.0f} bpm)")
    if spo2.average is not None:
        parts.append(f"SpO2 is {spo2.status_text} ({spo2.average:.1f}%)")

    if not parts:
        return "Health data is being collected. Please check back soon."

    all_normal = all(
        m.average is None or m.status == "normal" for m in (temp, hr, spo2)
    )
    if all_normal:
        return (
            f"Your {', '.join(parts)}. All vitals are within normal ranges. "
            "Continue monitoring your health."
        )
    return (
        f"Your {', '.join(parts)}. Please monitor your symptoms and consider consulting "
        "with a healthcare professional if needed."
    )

def temperature_card_status(last_value: float) -> Tuple[str, str]:
    """Card message for the newest reading, and its severity level."""
    if 30 <= last_value <= 40:
        return "Your body temperature is normal.", "normal"
    if 40 < last_value <= 50:
        return "Body temperature is higher than usual.", "elevated"
    if last_value > 50:
        return "Temperature is high, please check with a doctor.", "high"
    return "Temperature reading is out of expected range.", "out_of_range"

def is_normal_reading(last_value: float) -> bool:
    return 30 <= last_value <= 40
