"""정규화된 날씨 모델입니다. / Normalized weather models."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from ..base import RadiosondeModel


class PressureTrend(str, Enum):
    """기압 경향입니다. / Barometric pressure trend."""

    RISING = "rising"
    FALLING = "falling"
    STEADY = "steady"


class AlertSeverity(str, Enum):
    """정규화된 경보 등급입니다. / Normalized alert severity tier."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class SuitabilityRating(str, Enum):
    """비행 적합도 등급입니다. / Flight suitability rating."""

    EXCELLENT = "excellent"
    GOOD = "good"
    MARGINAL = "marginal"
    NO_GO = "no-go"


class SensorObservation(RadiosondeModel):
    """개인 센서 관측입니다. / Personal sensor observation."""

    timestamp: datetime
    temperature_c: float
    temperature_f: float
    humidity: float = Field(ge=0)
    pressure_mb: float
    pressure_trend: PressureTrend = PressureTrend.STEADY
    wind_speed_mph: int = Field(ge=0)
    wind_gust_mph: int = Field(ge=0)
    wind_direction: str
    feels_like_c: float
    feels_like_f: float
    dew_point_c: float
    dew_point_f: float
    uv: float = Field(default=0.0, ge=0)
    precip_today_in: float = Field(default=0.0, ge=0)
    precip_yesterday_in: float = Field(default=0.0, ge=0)


class StationObservation(RadiosondeModel):
    """공식 관측소 관측입니다. / Official station observation."""

    station_id: str
    station_name: str
    observation_time: str
    temperature: float
    dew_point: float
    humidity: float
    wind: str
    visibility: float
    weather: str
    sky: str
    pressure_in: float
    pressure_mb: float
    precip_today: float = Field(default=0.0, ge=0)
    precip_yesterday: float = Field(default=0.0, ge=0)


class ForecastDiscussion(RadiosondeModel):
    """예보 토의 섹션입니다. / Area forecast discussion sections."""

    synopsis: str = ""
    near_term: str = ""
    short_term: str = ""
    long_term: str = ""


class HazardOutlook(RadiosondeModel):
    """위험 기상 전망입니다. / Hazardous weather outlook."""

    day_one: str = ""
    days_two_through_seven: str = ""
    spotter_info: str = ""
    has_active_hazards: bool = False


class Alert(RadiosondeModel):
    """활성 기상 경보입니다. / Active weather alert."""

    event: str
    severity: AlertSeverity
    icon: str
    headline: str = ""
    description: str = ""
    effective: Optional[datetime] = None
    expires: Optional[datetime] = None
    areas: str = ""


class DailyForecast(RadiosondeModel):
    """일별 예보 요약입니다. / Daily forecast summary."""

    day: str
    high: float
    low: float
    condition: str
    icon: str
    short_forecast: str = ""


class HourlyPeriod(RadiosondeModel):
    """원시 시간별 예보입니다. / Raw hourly forecast period."""

    start_time: datetime
    temperature: float
    wind_speed: str = ""
    wind_direction: str = ""
    precip_probability: float = Field(default=0.0, ge=0, le=100)
    short_forecast: str = ""


class HourlyForecastPoint(RadiosondeModel):
    """평가된 시간별 예보입니다. / Rated hourly forecast point."""

    hour: int = Field(ge=0, le=23)
    time_label: str
    temperature: float
    wind_speed: int = Field(ge=0)
    wind_direction: str
    precip_probability: float
    short_forecast: str
    rating: SuitabilityRating
    issues: List[str] = Field(default_factory=list)


class FlightWindowReport(RadiosondeModel):
    """하루 비행 창 보고서입니다. / One-day flight window report."""

    day: date
    hours: List[HourlyForecastPoint]
    best_window: Optional[str] = None
    flyable_hours: int = Field(ge=0)
    summary: str


class WeatherData(RadiosondeModel):
    """한 주기의 수집 결과입니다. / One fetch cycle's collected data."""

    fetched_at: datetime
    sensor: Optional[SensorObservation] = None
    station: Optional[StationObservation] = None
    discussion: Optional[ForecastDiscussion] = None
    outlook: Optional[HazardOutlook] = None
    alerts: List[Alert] = Field(default_factory=list)
    daily_forecast: List[DailyForecast] = Field(default_factory=list)
    flight_window: Optional[FlightWindowReport] = None
