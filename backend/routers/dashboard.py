# app/routers/dashboard.py
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

import config
from ai import ask_for_health_assessment
from models import DateFilter
from storage import get_profile, get_settings
from vitals import (
    build_assessment_prompt,
    fallback_assessment,
    patient_context,
    summarize_heart_rate,
    summarize_spo2,
    summarize_temperature,
    temperature_card_status,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])

TEMPERATURE_WINDOW = 15
VITALS_WINDOW = 10

HEALTH_DATA_UNAVAILABLE = "Unable to load health data. Please try again later."

def _store_error(what: str, e: Exception) -> JSONResponse:
    logger.error("Supabase %s query failed: %s", what, e)
    return JSONResponse(status_code=502, content={"error": f"Unable to load {what} data."})

@router.get("/api/vitals/temperature")
def get_temperature(start: Optional[str] = None, end: Optional[str] = None):
    store = config.get_sensor_store()
    try:
        rows = store.temperatures(start=start, end=end)
    except Exception as e:
        return _store_error("temperature", e)

    readings = [
        {"value": row.get("degree"), "timestamp": row.get("time")}
        for row in rows
        if row.get("degree") is not None
    ]
    if not readings:
        return {"readings": [], "status": "No temperature readings yet.", "level": "empty"}

    status, level = temperature_card_status(readings[-1]["value"])
    return {"readings": readings, "status": status, "level": level}

@router.get("/api/vitals/summary")
async def get_vitals_summary():
    store = config.get_sensor_store()
    try:
        temp_rows, vitals_rows = await asyncio.gather(
            run_in_threadpool(store.latest_temperatures, TEMPERATURE_WINDOW),
            run_in_threadpool(store.latest_vitals, VITALS_WINDOW),
        )
    except Exception as e:
        return _store_error("vitals", e)

    return {
        "temperature": summarize_temperature(temp_rows),
        "heart_rate": summarize_heart_rate(vitals_rows),
        "spo2": summarize_spo2(vitals_rows),
    }

@router.get("/api/health_analysis")
async def health_analysis(request: Request):
    try:
        store = config.get_sensor_store()
        temp_rows, vitals_rows = await asyncio.gather(
            run_in_threadpool(store.latest_temperatures, TEMPERATURE_WINDOW),
            run_in_threadpool(store.latest_vitals, VITALS_WINDOW),
        )
    except Exception as e:
        logger.error("Health data unavailable: %s", e)
        return {"analysis": HEALTH_DATA_UNAVAILABLE}

    temp = summarize_temperature(temp_rows)
    hr = summarize_heart_rate(vitals_rows)
    spo2 = summarize_spo2(vitals_rows)

    prompt = build_assessment_prompt(temp, hr, spo2, patient_context(get_profile()))
    origin = request.headers.get("origin") or request.headers.get("referer")
    try:
        reply = await ask_for_health_assessment(prompt, origin=origin)
    except Exception:
        logger.exception("Health assessment failed, using fallback text")
        reply = None

    return {
        "temperature": temp,
        "heart_rate": hr,
        "spo2": spo2,
        "analysis": reply or fallback_assessment(temp, hr, spo2),
    }

@router.get("/api/charts/temperature")
def temperature_chart(request: Request, view: Optional[str] = None):
    panel = request.app.state.temperature_panel
    store = config.get_sensor_store()
    try:
        rows = store.temperatures(start=panel.start, end=panel.end)
    except Exception as e:
        return _store_error("temperature", e)

    panel.refresh(rows)
    if view == "large":
        chart = panel.open()
    elif view == "thumb":
        chart = panel.hover()
    else:
        chart = panel.thumb.config() if panel.thumb.rendered else None

    return {**panel.state(), "chart": chart}

@router.post("/api/charts/temperature/filter")
def set_temperature_filter(request: Request, body: DateFilter):
    panel = request.app.state.temperature_panel
    try:
        panel.set_date_filter(body.start, body.end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return panel.state()

@router.delete("/api/charts/temperature/filter")
def clear_temperature_filter(request: Request):
    panel = request.app.state.temperature_panel
    panel.clear_date_filter()
    return panel.state()

@router.get("/api/charts/vitals")
def vitals_charts(request: Request, width: Optional[float] = None, dpr: float = 1):
    panel = request.app.state.vitals_panel
    points = panel.resize(width, dpr)
    store = config.get_sensor_store()
    try:
        rows = store.vitals_series(points)
    except Exception as e:
        return _store_error("heart rate", e)

    charts = panel.refresh(rows, theme=get_settings()["theme"])
    return {"max_points": points, **charts}
