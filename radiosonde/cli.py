"""운영자용 CLI입니다. / Operator-facing CLI."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from pathlib import Path
from typing import List

import httpx
import typer

from .config import AppConfig, load_app_config
from .flight.window import analyze_flight_window
from .pipeline import CycleResult, InsufficientDataError, local_now, run_cycle, should_notify
from .state.models import ChangeSet, Snapshot
from .state.store import SnapshotStore
from .weather.models import FlightWindowReport, WeatherData
from .weather.providers import NwsSource, WeatherProviderError

app = typer.Typer(help="Radiosonde weather change CLI")

CONFIG_OPTION = typer.Option(Path("config.yaml"), "--config", help="YAML config path")


@app.callback()
def _configure(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    """로깅을 설정합니다. / Configure logging."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _summary_lines(weather: WeatherData) -> List[str]:
    """데이터 요약 줄입니다. / Data summary lines."""

    sensor = weather.sensor
    station = weather.station
    outlook = weather.outlook
    if outlook is None:
        outlook_text = "unavailable"
    else:
        outlook_text = "ACTIVE HAZARDS" if outlook.has_active_hazards else "no hazards"
    return [
        "Data summary:",
        f"  Sensor: {f'{sensor.temperature_f}°F' if sensor else 'unavailable'}",
        (
            f"  Station: {station.station_name} @ {station.observation_time}"
            f" - {station.temperature:g}°F"
            if station
            else "  Station: unavailable"
        ),
        f"  AFD: {'available' if weather.discussion else 'unavailable'}",
        f"  HWO: {outlook_text}",
        f"  Forecast: {len(weather.daily_forecast)} days",
        f"  Alerts: {len(weather.alerts)} active",
        (
            f'  Precip: {station.precip_today:g}" today, '
            f'{station.precip_yesterday:g}" yesterday'
            if station
            else "  Precip: unavailable"
        ),
    ]


def _change_lines(changes: ChangeSet) -> List[str]:
    """변경 목록 줄입니다. / Change list lines."""

    lines = [f"Changes detected: {'YES' if changes.has_changes else 'No'}"]
    for label, entries in (
        ("Alert changes", changes.alert_changes),
        ("Condition changes", changes.condition_changes),
        ("Forecast changes", changes.forecast_changes),
    ):
        if entries:
            lines.append(f"  {label}: {'; '.join(entries)}")
    return lines


def _flight_lines(report: FlightWindowReport) -> List[str]:
    """비행 창 표 줄입니다. / Flight window table lines."""

    lines = [
        f"Flight window for {report.day.isoformat()}: {report.summary}",
        "Hour  | Rating    | Temp (°F) | Wind (mph) | PoP (%) | Issues",
        "------|-----------|-----------|------------|---------|-------",
    ]
    for point in report.hours:
        lines.append(
            f"{point.time_label:<5} | {point.rating:<9} | {point.temperature:>9.0f} | "
            f"{point.wind_speed:>10} | {point.precip_probability:>7.0f} | "
            f"{'; '.join(point.issues)}"
        )
    return lines


def _snapshot_lines(snapshot: Snapshot) -> List[str]:
    """스냅샷 줄입니다. / Snapshot lines."""

    conditions = snapshot.conditions
    return [
        f"Snapshot at {snapshot.timestamp.isoformat()}",
        f"  Alerts ({snapshot.alerts.count}): {', '.join(snapshot.alerts.types) or 'none'}",
        (
            f"  Conditions: {conditions.temperature:g}°F, wind {conditions.wind or 'n/a'}, "
            f"{conditions.pressure:g} mb, {conditions.weather or 'n/a'}, "
            f"visibility {conditions.visibility:g} mi"
        ),
        f"  Hazards: {'YES' if snapshot.outlook.has_active_hazards else 'No'}",
        f'  Precip: {snapshot.precip.today:g}" today, {snapshot.precip.yesterday:g}" yesterday',
    ]


def _decide(result: CycleResult, config: AppConfig, alerts_only: bool) -> bool:
    """알림 여부를 판단합니다. / Decide whether downstream should be notified."""

    if alerts_only and not result.active_warnings:
        return False
    return should_notify(
        result.changes,
        result.previous,
        result.snapshot.timestamp,
        stale_after=timedelta(hours=config.stale_after_hours),
    )


@app.command("check")
def check(
    config_path: Path = CONFIG_OPTION,
    alerts_only: bool = typer.Option(
        False, "--alerts-only", help="Only notify while warnings are active"
    ),
) -> None:
    """한 주기를 실행합니다. / Run one fetch-and-decide cycle."""

    config = load_app_config(config_path)
    store = SnapshotStore(config.state_path)
    try:
        result = asyncio.run(run_cycle(config, store))
    except InsufficientDataError as exc:
        typer.echo(f"Aborting: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo("\n".join(_summary_lines(result.weather)))
    typer.echo(f"Active warnings: {'YES' if result.active_warnings else 'No'}")
    typer.echo("\n".join(_change_lines(result.changes)))
    if result.weather.flight_window is not None:
        typer.echo(result.weather.flight_window.summary)
    typer.echo(f"Notify: {'YES' if _decide(result, config, alerts_only) else 'No'}")


@app.command("flight-window")
def flight_window(config_path: Path = CONFIG_OPTION) -> None:
    """오늘의 비행 창을 출력합니다. / Print today's drone flight window."""

    config = load_app_config(config_path)
    now = local_now(config)

    async def _run() -> FlightWindowReport:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            nws = NwsSource(
                client,
                config.http,
                config.nws,
                config.location.latitude,
                config.location.longitude,
            )
            _, hourly = await nws.fetch_forecasts()
        return analyze_flight_window(hourly, now.date(), now.tzinfo)

    try:
        report = asyncio.run(_run())
    except WeatherProviderError as exc:
        typer.echo(f"Forecast unavailable: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo("\n".join(_flight_lines(report)))


@app.command("show-state")
def show_state(config_path: Path = CONFIG_OPTION) -> None:
    """저장된 스냅샷을 출력합니다. / Print the stored snapshot."""

    config = load_app_config(config_path)
    snapshot = SnapshotStore(config.state_path).load()
    if snapshot is None:
        typer.echo("No previous snapshot")
        return
    typer.echo("\n".join(_snapshot_lines(snapshot)))


def main() -> None:
    """CLI 엔트리 포인트입니다. / CLI entry point."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI guard
    main()
