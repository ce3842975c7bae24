"""수집-판단 주기 테스트입니다. / Fetch-and-decide cycle tests."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict
from zoneinfo import ZoneInfo

import httpx
import pytest
import respx

from radiosonde.config import AppConfig, HttpSettings, NwsSettings, TempestSettings
from radiosonde.pipeline import InsufficientDataError, run_cycle
from radiosonde.state.changes import NO_BASELINE
from radiosonde.state.models import build_snapshot
from radiosonde.state.store import SnapshotStore
from radiosonde.weather.models import WeatherData

NOW = datetime(2025, 1, 15, 9, 30, tzinfo=ZoneInfo("America/New_York"))

TEMPEST_PAYLOAD: Dict[str, Any] = {
    "obs": [
        {
            "timestamp": 1736951400,
            "air_temperature": -1.5,
            "relative_humidity": 85,
            "sea_level_pressure": 1013.2,
            "pressure_trend": "falling",
            "wind_avg": 6.3,
            "wind_gust": 10.7,
            "wind_direction": 270,
            "feels_like": -6.8,
            "dew_point": -3.9,
            "uv": 1,
            "precip_accum_local_day": 1.8,
            "precip_accum_local_yesterday": 3.3,
        }
    ]
}

OBS_ROW = (
    "<tr>" + "".join(
        f"<td>{cell}</td>"
        for cell in [
            "15", "09:54", "W 14 G 24", "2.50", "Light Snow", "OVC012", "28", "24",
            "", "", "85%", "17", "NA", "29.92", "1013.2", "0.04", "", "",
        ]
    ) + "</tr>"
)
OBS_HTML = f"<table>{OBS_ROW}</table>"

AFD_HTML = """<pre>
.SYNOPSIS...
Lake effect snow continues east of Lake Erie through tonight.

&&
.NEAR TERM /THROUGH TONIGHT/...
Heavy snow bands.
&&
</pre>"""

HWO_HTML = """<pre>
.DAY ONE...Today and tonight.
A Lake Effect Snow Warning is in effect.
.DAYS TWO THROUGH SEVEN...Thursday through Tuesday.
No hazardous weather is expected.
$$
</pre>"""

POINTS_PAYLOAD = {
    "properties": {
        "forecast": "https://api.test/gridpoints/BUF/1,1/forecast",
        "forecastHourly": "https://api.test/gridpoints/BUF/1,1/forecast/hourly",
    }
}

DAILY_PAYLOAD = {
    "properties": {
        "periods": [
            {"startTime": "2025-01-15T06:00:00-05:00", "temperature": 28, "shortForecast": "Snow Showers"},
            {"startTime": "2025-01-15T18:00:00-05:00", "temperature": 19, "shortForecast": "Snow"},
        ]
    }
}

HOURLY_PAYLOAD = {
    "properties": {
        "periods": [
            {
                "startTime": f"2025-01-15T{hour:02d}:00:00-05:00",
                "temperature": 40,
                "windSpeed": "5 to 10 mph",
                "windDirection": "W",
                "probabilityOfPrecipitation": {"unit": "wmoUnit:percent", "value": 10},
                "shortForecast": "Mostly Cloudy",
            }
            for hour in range(6, 12)
        ]
    }
}

ALERTS_PAYLOAD = {
    "features": [
        {
            "properties": {
                "event": "Lake Effect Snow Warning",
                "severity": "Severe",
                "headline": "Lake Effect Snow Warning until 7 PM",
                "areaDesc": "Southern Erie",
            }
        }
    ]
}


def _config(tmp_path) -> AppConfig:
    return AppConfig(
        tempest=TempestSettings(base_url="https://tempest.test", token="token"),
        nws=NwsSettings(
            api_base_url="https://api.test",
            products_base_url="https://products.test",
            observations_base_url="https://obs.test",
        ),
        http=HttpSettings(timeout_seconds=1.0, retries=1),
        state_path=tmp_path / "state.json",
    )


def _register(mock: respx.MockRouter, **failures: int) -> None:
    def route(name: str, **response: Any) -> Callable[[httpx.Request], httpx.Response]:
        def _respond(request: httpx.Request) -> httpx.Response:
            status = failures.get(name)
            if status:
                return httpx.Response(status)
            return httpx.Response(200, **response)

        return _respond

    mock.get("https://tempest.test/observations/station/36763").mock(
        side_effect=route("sensor", json=TEMPEST_PAYLOAD)
    )
    mock.get("https://obs.test/KBUF.html").mock(
        side_effect=route("station", text=OBS_HTML)
    )
    mock.get("https://products.test/product.php", params={"product": "AFD"}).mock(
        side_effect=route("discussion", text=AFD_HTML)
    )
    mock.get("https://products.test/product.php", params={"product": "HWO"}).mock(
        side_effect=route("outlook", text=HWO_HTML)
    )
    mock.get(url__regex=r"^https://api\.test/points/.*").mock(
        side_effect=route("forecasts", json=POINTS_PAYLOAD)
    )
    mock.get("https://api.test/gridpoints/BUF/1,1/forecast").mock(
        side_effect=route("daily", json=DAILY_PAYLOAD)
    )
    mock.get("https://api.test/gridpoints/BUF/1,1/forecast/hourly").mock(
        side_effect=route("hourly", json=HOURLY_PAYLOAD)
    )
    mock.get("https://api.test/alerts/active").mock(
        side_effect=route("alerts", json=ALERTS_PAYLOAD)
    )


@pytest.mark.asyncio
async def test_cycle_builds_and_saves_snapshot(tmp_path) -> None:
    """전체 주기를 실행합니다. / Runs a full cycle and persists it."""

    config = _config(tmp_path)
    store = SnapshotStore(config.state_path)
    with respx.mock(assert_all_called=False) as mock:
        _register(mock)
        first = await run_cycle(config, store, now=NOW)
        second = await run_cycle(config, store, now=NOW)

    weather = first.weather
    assert weather.sensor is not None
    assert weather.sensor.temperature_f == pytest.approx(29.3)
    assert weather.sensor.wind_direction == "W"
    assert weather.station is not None
    assert weather.station.precip_today == pytest.approx(0.04)
    assert weather.discussion is not None
    assert weather.discussion.near_term == "Heavy snow bands."
    assert weather.outlook is not None and weather.outlook.has_active_hazards
    assert [day.condition for day in weather.daily_forecast] == ["snow"]
    assert weather.flight_window is not None
    assert weather.flight_window.flyable_hours == 6
    assert weather.flight_window.best_window == "6 AM–12 PM"

    assert first.previous is None
    assert first.changes.alert_changes == [NO_BASELINE]
    assert first.active_warnings is True
    assert first.snapshot.conditions.temperature == pytest.approx(28.0)
    assert first.snapshot.alerts.types == ["Lake Effect Snow Warning"]

    assert second.previous == first.snapshot
    assert second.changes.has_changes is False
    assert store.load() == second.snapshot


@pytest.mark.asyncio
async def test_failed_source_degrades_field(tmp_path) -> None:
    """실패한 소스는 해당 필드만 비웁니다. / A failed source only blanks its field."""

    config = _config(tmp_path)
    store = SnapshotStore(config.state_path)
    with respx.mock(assert_all_called=False) as mock:
        _register(mock, alerts=500, station=503)
        result = await run_cycle(config, store, now=NOW)

    assert result.weather.alerts == []
    assert result.weather.station is None
    assert result.snapshot.conditions.temperature == pytest.approx(29.3)
    assert result.snapshot.conditions.wind == "W 14"
    assert result.snapshot.conditions.visibility == pytest.approx(10.0)
    assert store.load() is not None


@pytest.mark.asyncio
async def test_insufficient_data_aborts_without_saving(tmp_path) -> None:
    """주요 소스가 모두 없으면 중단합니다. / Aborts when both primaries are absent."""

    config = _config(tmp_path)
    store = SnapshotStore(config.state_path)
    with respx.mock(assert_all_called=False) as mock:
        _register(mock, sensor=500, discussion=500)
        with pytest.raises(InsufficientDataError):
            await run_cycle(config, store, now=NOW)
    assert store.load() is None
    assert not config.state_path.exists()


def test_build_snapshot_without_sources() -> None:
    """소스가 없을 때 기본값입니다. / Defaults when every source is absent."""

    snapshot = build_snapshot(WeatherData(fetched_at=NOW))
    assert snapshot.alerts.count == 0
    assert snapshot.conditions.visibility == pytest.approx(10.0)
    assert snapshot.discussion.synopsis == ""
    assert snapshot.outlook.has_active_hazards is False
    assert snapshot.precip.today == 0.0
