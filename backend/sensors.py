# app/sensors.py
"""
Read-only access to the Supabase tables the sensors write into.

``temper``     -> {degree, time}
``heartrate``  -> {bpm, spo2, created_at}

Every method returns the raw row dicts from PostgREST. "latest" queries come
back newest-first, the series methods oldest-first. Query errors are raised
by the client (``postgrest.exceptions.APIError``) and left to the caller.
"""
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

TEMPERATURE_TABLE = "temper"
TEMPERATURE_COLUMNS = "degree, time"
TEMPERATURE_TIME_COLUMN = "time"

VITALS_TABLE = "heartrate"
VITALS_TIME_COLUMN = "created_at"
VITALS_COLUMNS = f"bpm, spo2, {VITALS_TIME_COLUMN}"


def _day_start(value: str) -> str:
    return datetime.fromisoformat(value[:10]).isoformat()


def _day_after(value: str) -> str:
    # end dates are inclusive, so the bound is midnight of the following day
    day = date.fromisoformat(value[:10])
    return datetime.combine(day + timedelta(days=1), datetime.min.time()).isoformat()


class SensorStore:
    def __init__(self, client):
        self.client = client

    def latest_temperatures(self, limit: int = 15) -> List[Dict[str, Any]]:
        response = (
            self.client.table(TEMPERATURE_TABLE)
            .select(TEMPERATURE_COLUMNS)
            .order(TEMPERATURE_TIME_COLUMN, desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []

    def temperatures(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        query = (
            self.client.table(TEMPERATURE_TABLE)
            .select(TEMPERATURE_COLUMNS)
            .order(TEMPERATURE_TIME_COLUMN, desc=False)
        )
        if start:
            query = query.gte(TEMPERATURE_TIME_COLUMN, _day_start(start))
        if end:
            query = query.lt(TEMPERATURE_TIME_COLUMN, _day_after(end))
        if limit:
            query = query.limit(limit)
        return query.execute().data or []

    def latest_vitals(self, limit: int = 10) -> List[Dict[str, Any]]:
        response = (
            self.client.table(VITALS_TABLE)
            .select(VITALS_COLUMNS)
            .order(VITALS_TIME_COLUMN, desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []

    def vitals_series(self, limit: int = 150) -> List[Dict[str, Any]]:
        # newest window, returned oldest-first for plotting
        return list(reversed(self.latest_vitals(limit)))


def reading_time(row: Dict[str, Any]) -> Any:
    """Timestamp of a row, whichever column the table uses."""
    return (
        row.get(VITALS_TIME_COLUMN)
        or row.get(TEMPERATURE_TIME_COLUMN)
        or row.get("timestamp")
    )
