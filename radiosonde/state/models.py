"""스냅샷 상태 모델입니다. / Persisted snapshot state models."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import Field

from ..base import RadiosondeModel
from ..weather.models import WeatherData

DEFAULT_VISIBILITY = 10.0


class AlertState(RadiosondeModel):
    """경보 요약입니다. / Alert summary."""

    count: int = Field(default=0, ge=0)
    types: List[str] = Field(default_factory=list)
    headlines: List[str] = Field(default_factory=list)


class ConditionsState(RadiosondeModel):
    """요약된 현재 조건입니다. / Condensed current conditions."""

    temperature: float = 0.0
    wind: str = ""
    pressure: float = 0.0
    weather: str = ""
    visibility: float = DEFAULT_VISIBILITY


class DiscussionState(RadiosondeModel):
    """예보 토의 요약입니다. / Forecast discussion summary."""

    synopsis: str = ""
    near_term: str = ""


class OutlookState(RadiosondeModel):
    """위험 전망 요약입니다. / Hazard outlook summary."""

    day_one: str = ""
    has_active_hazards: bool = False


class PrecipState(RadiosondeModel):
    """강수 합계입니다. / Precipitation totals."""

    today: float = Field(default=0.0, ge=0)
    yesterday: float = Field(default=0.0, ge=0)


class Snapshot(RadiosondeModel):
    """저장되는 조건 스냅샷입니다. / Persisted conditions snapshot."""

    timestamp: datetime
    alerts: AlertState = Field(default_factory=AlertState)
    conditions: ConditionsState = Field(default_factory=ConditionsState)
    discussion: DiscussionState = Field(default_factory=DiscussionState)
    outlook: OutlookState = Field(default_factory=OutlookState)
    precip: PrecipState = Field(default_factory=PrecipState)


class ChangeSet(RadiosondeModel):
    """스냅샷 간 변경 목록입니다. / Changes between two snapshots."""

    has_changes: bool = False
    alert_changes: List[str] = Field(default_factory=list)
    condition_changes: List[str] = Field(default_factory=list)
    forecast_changes: List[str] = Field(default_factory=list)


def build_snapshot(weather: WeatherData) -> Snapshot:
    """수집 결과를 스냅샷으로 압축합니다. / Condense collected data into a snapshot.

    Station values take precedence; the sensor fills in temperature, wind
    and pressure when the station observation is absent.
    """

    station = weather.station
    sensor = weather.sensor
    if station is not None:
        conditions = ConditionsState(
            temperature=station.temperature,
            wind=station.wind,
            pressure=station.pressure_mb,
            weather=station.weather,
            visibility=station.visibility,
        )
    elif sensor is not None:
        conditions = ConditionsState(
            temperature=sensor.temperature_f,
            wind=f"{sensor.wind_direction} {sensor.wind_speed_mph}",
            pressure=sensor.pressure_mb,
        )
    else:
        conditions = ConditionsState()

    discussion = weather.discussion
    outlook = weather.outlook
    return Snapshot(
        timestamp=weather.fetched_at,
        alerts=AlertState(
            count=len(weather.alerts),
            types=[alert.event for alert in weather.alerts],
            headlines=[alert.headline for alert in weather.alerts],
        ),
        conditions=conditions,
        discussion=DiscussionState(
            synopsis=discussion.synopsis if discussion else "",
            near_term=discussion.near_term if discussion else "",
        ),
        outlook=OutlookState(
            day_one=outlook.day_one if outlook else "",
            has_active_hazards=outlook.has_active_hazards if outlook else False,
        ),
        precip=PrecipState(
            today=station.precip_today if station else 0.0,
            yesterday=station.precip_yesterday if station else 0.0,
        ),
    )
