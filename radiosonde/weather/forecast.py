"""예보 응답 변환기입니다. / Forecast payload converters."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Tuple

from .models import DailyForecast, HourlyPeriod

MAX_DAYS = 7
DAY_NAMES = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")

FREEZING_PRECIP_WORDS = ("rain", "snow", "precip", "shower", "wintry", "mix")


def _parse_timestamp(value: str) -> datetime:
    """타임스탬프를 파싱합니다. / Parse timestamp value."""

    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def classify_condition(short_forecast: str, temperature: float) -> Tuple[str, str]:
    """일별 상태와 아이콘을 고릅니다. / Pick daily condition and icon."""

    text = short_forecast.lower()
    if temperature <= 32 and any(word in text for word in FREEZING_PRECIP_WORDS):
        return "snow", "❄️"
    if "snow" in text or "flurr" in text or "wintry" in text:
        return "snow", "❄️"
    if "rain" in text or "shower" in text:
        return "rain", "🌧️"
    if "wind" in text:
        return "windy", "💨"
    if "cloud" in text or "overcast" in text:
        return "cloudy", "☁️"
    if "partly" in text:
        return "partly cloudy", "⛅"
    return "clear", "☀️"


def parse_daily_forecast(payload: Dict[str, Any]) -> List[DailyForecast]:
    """낮/밤 기간을 일별로 묶습니다. / Pair day and night periods into days."""

    periods = payload.get("properties", {}).get("periods") or []
    days: List[DailyForecast] = []
    for index in range(0, min(len(periods), MAX_DAYS * 2), 2):
        day_period = periods[index]
        night_period = periods[index + 1] if index + 1 < len(periods) else None
        start = _parse_timestamp(day_period["startTime"])
        high = float(day_period["temperature"])
        short_forecast = day_period.get("shortForecast") or ""
        condition, icon = classify_condition(short_forecast, high)
        days.append(
            DailyForecast(
                day=DAY_NAMES[start.weekday()],
                high=high,
                low=float(night_period["temperature"]) if night_period else high - 10,
                condition=condition,
                icon=icon,
                short_forecast=short_forecast,
            )
        )
    return days


def parse_hourly_periods(payload: Dict[str, Any]) -> List[HourlyPeriod]:
    """시간별 기간을 변환합니다. / Convert hourly forecast periods."""

    periods = payload.get("properties", {}).get("periods") or []
    hourly: List[HourlyPeriod] = []
    for item in periods:
        probability = (item.get("probabilityOfPrecipitation") or {}).get("value")
        hourly.append(
            HourlyPeriod(
                start_time=_parse_timestamp(item["startTime"]),
                temperature=float(item["temperature"]),
                wind_speed=item.get("windSpeed") or "",
                wind_direction=item.get("windDirection") or "",
                precip_probability=float(probability or 0),
                short_forecast=item.get("shortForecast") or "",
            )
        )
    return hourly
