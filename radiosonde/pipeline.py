"""수집-판단 주기 오케스트레이터입니다. / Fetch-and-decide cycle orchestrator.

One cycle fetches every source concurrently, condenses the results into a
snapshot, diffs it against the stored one and then stores the new snapshot.
A failed source only blanks its own part of the snapshot. The cycle aborts
with :class:`InsufficientDataError` when neither the sensor nor the forecast
discussion produced data, and nothing is saved on that path.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Dict, Optional
from zoneinfo import ZoneInfo

import httpx

from .base import RadiosondeModel
from .config import AppConfig
from .flight.window import analyze_flight_window
from .state.changes import detect_changes
from .state.models import ChangeSet, Snapshot, build_snapshot
from .state.store import SnapshotStore
from .weather.alerts import has_active_warnings
from .weather.models import WeatherData
from .weather.providers import NwsSource, TempestSource

LOGGER = logging.getLogger("radiosonde.pipeline")


class InsufficientDataError(Exception):
    """주요 조건 소스가 모두 없습니다. / Both primary condition sources are absent."""


class CycleResult(RadiosondeModel):
    """한 주기의 결과입니다. / Result of one cycle."""

    weather: WeatherData
    snapshot: Snapshot
    previous: Optional[Snapshot] = None
    changes: ChangeSet
    active_warnings: bool = False


async def _settle(tasks: Dict[str, Awaitable[Any]]) -> Dict[str, Any]:
    """모든 작업을 끝까지 기다립니다. / Wait for every task to resolve.

    Failures resolve to ``None`` and are logged.
    """

    names = list(tasks)
    results = await asyncio.gather(*tasks.values(), return_exceptions=True)
    settled: Dict[str, Any] = {}
    for name, result in zip(names, results):
        if isinstance(result, Exception):
            LOGGER.warning(
                "source_unavailable",
                extra={"source": name, "error": str(result)},
            )
            settled[name] = None
        else:
            settled[name] = result
    return settled


async def collect_weather(
    config: AppConfig,
    client: httpx.AsyncClient,
    now: datetime,
) -> WeatherData:
    """모든 소스를 동시에 수집합니다. / Collect all sources concurrently."""

    tempest = TempestSource(client, config.http, config.tempest)
    nws = NwsSource(
        client,
        config.http,
        config.nws,
        config.location.latitude,
        config.location.longitude,
    )
    settled = await _settle(
        {
            "sensor": tempest.fetch_observation(),
            "station": nws.fetch_observation_history(now),
            "discussion": nws.fetch_discussion(),
            "outlook": nws.fetch_outlook(),
            "forecasts": nws.fetch_forecasts(),
            "alerts": nws.fetch_alerts(),
        }
    )
    daily, hourly = settled["forecasts"] or ([], [])
    flight_window = (
        analyze_flight_window(hourly, now.date(), now.tzinfo) if hourly else None
    )
    return WeatherData(
        fetched_at=now,
        sensor=settled["sensor"],
        station=settled["station"],
        discussion=settled["discussion"],
        outlook=settled["outlook"],
        alerts=settled["alerts"] or [],
        daily_forecast=daily,
        flight_window=flight_window,
    )


def ensure_sufficient(weather: WeatherData) -> None:
    """주요 소스 존재를 확인합니다. / Ensure a primary condition source exists."""

    if weather.sensor is None and weather.discussion is None:
        raise InsufficientDataError("Insufficient weather data: sensor and discussion absent")


def _as_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def should_notify(
    changes: ChangeSet,
    previous: Optional[Snapshot],
    now: datetime,
    stale_after: timedelta = timedelta(hours=2),
) -> bool:
    """알림 여부를 정합니다. / Decide whether to notify downstream.

    Layered on top of change detection: a stale previous snapshot also
    triggers a notification. Naive timestamps are read as UTC.
    """

    if changes.has_changes or previous is None:
        return True
    return _as_aware(now) - _as_aware(previous.timestamp) >= stale_after


def local_now(config: AppConfig) -> datetime:
    """설정 시간대의 현재 시각입니다. / Current time in the configured zone."""

    return datetime.now(ZoneInfo(config.location.timezone)).replace(microsecond=0)


async def run_cycle(
    config: AppConfig,
    store: SnapshotStore,
    now: datetime | None = None,
    client: httpx.AsyncClient | None = None,
) -> CycleResult:
    """한 번의 수집-판단 주기를 실행합니다. / Run one fetch-and-decide cycle."""

    moment = now or local_now(config)
    if client is None:
        async with httpx.AsyncClient(follow_redirects=True) as owned:
            weather = await collect_weather(config, owned, moment)
    else:
        weather = await collect_weather(config, client, moment)

    ensure_sufficient(weather)
    snapshot = build_snapshot(weather)
    previous = store.load()
    changes = detect_changes(snapshot, previous)
    store.save(snapshot)
    LOGGER.info(
        "cycle_complete",
        extra={
            "has_changes": changes.has_changes,
            "alerts": snapshot.alerts.count,
        },
    )
    return CycleResult(
        weather=weather,
        snapshot=snapshot,
        previous=previous,
        changes=changes,
        active_warnings=has_active_warnings(weather.alerts),
    )
