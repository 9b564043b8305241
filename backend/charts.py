# app/charts.py
"""
Chart state for the dashboard cards.

Each chart is a ``VitalChart`` that owns its label/value buffers and hands
out a Chart.js ``line`` config; the browser only draws what it is given.
Panels group the charts of one card and keep the card's state (lazy
rendering, date filter) between refreshes.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sensors import reading_time
from storage import _parse_iso_to_datetime
from vitals import is_normal_reading, temperature_card_status

DEFAULT_MAX_POINTS = 150
MIN_POINTS = 60
PX_PER_POINT = 6


def compute_max_points(width: Optional[float] = None, device_pixel_ratio: float = 1) -> int:
    w = max(width or 0, 0) * (device_pixel_ratio or 1)
    if not w:
        return DEFAULT_MAX_POINTS
    return max(MIN_POINTS, min(DEFAULT_MAX_POINTS, int(w // PX_PER_POINT)))


@dataclass
class ChartStyle:
    label: str = ""
    border_color: str = "#ff4b5c"
    background_color: str = "transparent"
    border_width: float = 1.5
    tension: float = 0.3
    fill: bool = False
    point_radius: Optional[int] = None
    legend: bool = False
    y_scale: Dict[str, Any] = field(default_factory=dict)
    x_scale: Dict[str, Any] = field(default_factory=dict)
    maintain_aspect_ratio: bool = False
    themed: bool = False


TEMPERATURE_THUMB = ChartStyle(
    background_color="rgba(255,75,92,0.2)",
    fill=True,
    y_scale={"display": False, "min": 29},
    x_scale={"display": False},
)

TEMPERATURE_LARGE = ChartStyle(
    label="Temperature (°C)",
    background_color="rgba(255,75,92,0.3)",
    border_width=2,
    fill=True,
    legend=True,
    y_scale={"beginAtZero": False, "min": 29},
    x_scale={"ticks": {"autoSkip": True, "maxTicksLimit": 8}},
    maintain_aspect_ratio=True,
)

HEART_RATE = ChartStyle(
    border_color="#e67e22",
    tension=0.35,
    point_radius=0,
    themed=True,
    y_scale={"display": True, "beginAtZero": True, "suggestedMin": 0, "suggestedMax": 120},
    x_scale={"display": True, "ticks": {"maxTicksLimit": 6}},
)

SPO2 = ChartStyle(
    border_color="#2ecc71",
    tension=0.35,
    point_radius=0,
    themed=True,
    y_scale={"display": True, "suggestedMin": 88, "suggestedMax": 100},
    x_scale={"display": True, "ticks": {"maxTicksLimit": 6}},
)


def grid_color(theme: str, lightness: float = 0.06) -> str:
    return "rgba(255,255,255,0.12)" if theme == "dark" else f"rgba(0,0,0,{lightness})"


class VitalChart:
    """One line chart and the data it currently shows."""

    def __init__(self, style: ChartStyle, max_points: int = DEFAULT_MAX_POINTS):
        self.style = style
        self.max_points = max_points
        self.labels: List[str] = []
        self.values: List[Any] = []
        self.rendered = False

    def create(self, labels: List[str], values: List[Any], theme: str = "light") -> Dict[str, Any]:
        self.labels = list(labels)[-self.max_points:]
        self.values = list(values)[-self.max_points:]
        self.rendered = True
        return self.config(theme)

    def update(self, labels: List[str], values: List[Any], theme: str = "light") -> Optional[Dict[str, Any]]:
        """Swap in new data; only a rendered chart produces a config."""
        self.labels = list(labels)[-self.max_points:]
        self.values = list(values)[-self.max_points:]
        return self.config(theme) if self.rendered else None

    def push(self, label: str, value: Any) -> None:
        self.labels.append(label)
        self.values.append(value)
        if len(self.values) > self.max_points:
            self.labels = self.labels[-self.max_points:]
            self.values = self.values[-self.max_points:]

    def destroy(self) -> None:
        self.rendered = False

    def config(self, theme: str = "light") -> Optional[Dict[str, Any]]:
        if not self.values:
            return None
        s = self.style

        dataset = {
            "label": s.label,
            "data": list(self.values),
            "borderColor": s.border_color,
            "backgroundColor": s.background_color,
            "borderWidth": s.border_width,
            "tension": s.tension,
            "fill": s.fill,
        }
        if s.point_radius is not None:
            dataset["pointRadius"] = s.point_radius

        y_scale = dict(s.y_scale)
        x_scale = dict(s.x_scale)
        if s.themed:
            tick_color = "#ffffff" if theme == "dark" else "#1f2933"
            y_scale["grid"] = {"color": grid_color(theme, 0.06)}
            y_scale["ticks"] = {**y_scale.get("ticks", {}), "color": tick_color}
            x_scale["grid"] = {"color": grid_color(theme, 0.04)}
            x_scale["ticks"] = {**x_scale.get("ticks", {}), "color": tick_color}

        plugins: Dict[str, Any] = {"legend": {"display": s.legend}}
        if s.legend:
            plugins["legend"]["position"] = "top"
        if s.themed:
            plugins["tooltip"] = {"intersect": False, "mode": "index"}

        return {
            "type": "line",
            "data": {"labels": list(self.labels), "datasets": [dataset]},
            "options": {
                "responsive": True,
                "maintainAspectRatio": s.maintain_aspect_ratio,
                "plugins": plugins,
                "scales": {"y": y_scale, "x": x_scale},
            },
        }


def time_label(value: Any, with_date: bool = False) -> str:
    dt = _parse_iso_to_datetime(value)
    if dt == datetime.min:
        return str(value)
    if with_date:
        return f"{dt.strftime('%b')} {dt.day}, {dt.strftime('%H:%M')}"
    return dt.strftime("%H:%M")


class TemperaturePanel:
    """Temperature card: thumbnail sparkline, modal chart and date filter."""

    def __init__(self):
        self.thumb = VitalChart(TEMPERATURE_THUMB)
        self.large = VitalChart(TEMPERATURE_LARGE)
        self.start: Optional[str] = None
        self.end: Optional[str] = None
        self.is_normal = False
        self.status_message = "No temperature readings yet."
        self.status_level = "empty"
        self._labels: List[str] = []
        self._values: List[Any] = []

    @property
    def filtered(self) -> bool:
        return bool(self.start or self.end)

    def set_date_filter(self, start: Optional[str], end: Optional[str]) -> None:
        start_day = date.fromisoformat(start[:10]) if start else None
        end_day = date.fromisoformat(end[:10]) if end else None
        if start_day and end_day and start_day > end_day:
            raise ValueError("Start date must be before end date!")
        self.start = start or None
        self.end = end or None

    def clear_date_filter(self) -> None:
        self.start = None
        self.end = None

    def refresh(self, rows: List[Dict[str, Any]]) -> None:
        """Take chronological ``temper`` rows and update card state."""
        rows = [row for row in rows or [] if row.get("degree") is not None]
        if not rows:
            self.status_message = "No temperature readings yet."
            self.status_level = "empty"
            return

        self._labels = [time_label(row.get("time"), with_date=self.filtered) for row in rows]
        self._values = [row.get("degree") for row in rows]

        last = self._values[-1]
        self.status_message, self.status_level = temperature_card_status(last)
        self.is_normal = is_normal_reading(last)

        if not self.is_normal:
            # abnormal readings show the thumbnail straight away
            self.thumb.create(self._labels, self._values)
        else:
            self.thumb.destroy()
            self.thumb.update(self._labels, self._values)
        self.large.update(self._labels, self._values)

    def hover(self) -> Optional[Dict[str, Any]]:
        if self.is_normal and not self.thumb.rendered:
            return self.thumb.create(self._labels, self._values)
        return self.thumb.config() if self.thumb.rendered else None

    def open(self) -> Optional[Dict[str, Any]]:
        if not self.large.rendered:
            return self.large.create(self._labels, self._values)
        return self.large.config()

    def state(self) -> Dict[str, Any]:
        return {
            "status": self.status_message,
            "level": self.status_level,
            "is_normal": self.is_normal,
            "visible_thumb": not self.is_normal and self.thumb.rendered,
            "filter": {"start": self.start, "end": self.end},
        }


class VitalsPanel:
    """Heart-rate and SpO2 sparklines fed from the ``heartrate`` table."""

    def __init__(self, max_points: int = DEFAULT_MAX_POINTS):
        self.heart_rate = VitalChart(HEART_RATE, max_points)
        self.spo2 = VitalChart(SPO2, max_points)

    @property
    def max_points(self) -> int:
        return self.heart_rate.max_points

    def resize(self, width: Optional[float], device_pixel_ratio: float = 1) -> int:
        points = compute_max_points(width, device_pixel_ratio)
        self.heart_rate.max_points = points
        self.spo2.max_points = points
        return points

    def refresh(self, rows: List[Dict[str, Any]], theme: str = "light") -> Dict[str, Any]:
        """``rows`` oldest-first; each chart keeps only the rows that carry its value."""
        hr_rows = [r for r in rows if r.get("bpm") is not None]
        spo2_rows = [r for r in rows if r.get("spo2") is not None]
        return {
            "heart_rate": self.heart_rate.create(
                [time_label(reading_time(r)) for r in hr_rows],
                [r["bpm"] for r in hr_rows],
                theme,
            ),
            "spo2": self.spo2.create(
                [time_label(reading_time(r)) for r in spo2_rows],
                [r["spo2"] for r in spo2_rows],
                theme,
            ),
        }

    def destroy(self) -> None:
        self.heart_rate.destroy()
        self.spo2.destroy()
