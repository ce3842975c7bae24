"""스냅샷 변경 감지기입니다. / Snapshot change detector."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .models import ChangeSet, ConditionsState, Snapshot

TEMPERATURE_DELTA_F = 5.0
LOW_VISIBILITY_MI = 3.0
RECOVERED_VISIBILITY_MI = 6.0
PRECIP_INCREASE_IN = 0.1
SYNOPSIS_PREFIX = 50

NO_BASELINE = "Initial report - no previous data to compare"


def _unique(labels: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for label in labels:
        if label not in seen:
            seen.append(label)
    return seen


def _number(value: float) -> str:
    return f"{value:g}"


def alert_changes(current: Snapshot, previous: Snapshot) -> List[str]:
    """경보 종류 변화를 찾습니다. / Find alert category changes."""

    current_types = _unique(current.alerts.types)
    previous_types = _unique(previous.alerts.types)
    changes: List[str] = []
    new_types = [label for label in current_types if label not in previous_types]
    if new_types:
        changes.append(f"NEW ALERTS: {', '.join(new_types)}")
    expired = [label for label in previous_types if label not in current_types]
    if expired:
        changes.append(f"EXPIRED: {', '.join(expired)}")
    return changes


def temperature_change(
    current: ConditionsState, previous: ConditionsState
) -> Optional[str]:
    """큰 기온 변화를 찾습니다. / Report a significant temperature swing."""

    delta = current.temperature - previous.temperature
    if abs(delta) < TEMPERATURE_DELTA_F:
        return None
    direction = "risen" if delta > 0 else "fallen"
    return (
        f"Temperature has {direction} {abs(delta):.0f}°F "
        f"(was {previous.temperature:.0f}°F, now {current.temperature:.0f}°F)"
    )


def visibility_change(
    current: ConditionsState, previous: ConditionsState
) -> Optional[str]:
    """시정 임계 통과를 찾습니다. / Report visibility threshold crossings.

    Dropping below 3 mi and recovering to 6 mi are separate thresholds, so
    readings bouncing between them are not reported.
    """

    if current.visibility < LOW_VISIBILITY_MI <= previous.visibility:
        return f"Visibility dropped to {_number(current.visibility)} miles"
    if (
        current.visibility >= RECOVERED_VISIBILITY_MI
        and previous.visibility < LOW_VISIBILITY_MI
    ):
        return f"Visibility improved to {_number(current.visibility)} miles"
    return None


def precipitation_change(current: Snapshot, previous: Snapshot) -> Optional[str]:
    """강수 증가를 찾습니다. / Report new precipitation since last snapshot."""

    increase = round(current.precip.today - previous.precip.today, 2)
    if increase < PRECIP_INCREASE_IN:
        return None
    return (
        f'Additional {increase:.2f}" precipitation recorded '
        f'(total today: {_number(current.precip.today)}")'
    )


def weather_change(
    current: ConditionsState, previous: ConditionsState
) -> Optional[str]:
    """날씨 설명 변화를 찾습니다. / Report a weather description transition.

    Snow onset wins over rain onset, which wins over the generic change.
    """

    now, before = current.weather, previous.weather
    if not now or now == before:
        return None
    if "snow" in now.lower() and "snow" not in before.lower():
        return f"Snow has begun: {now}"
    if "rain" in now.lower() and "rain" not in before.lower():
        return f"Rain has begun: {now}"
    if before:
        return f'Conditions changed from "{before}" to "{now}"'
    return None


def forecast_changes(current: Snapshot, previous: Snapshot) -> List[str]:
    """예보 텍스트 변화를 찾습니다. / Find forecast text changes."""

    changes: List[str] = []
    old_synopsis = previous.discussion.synopsis
    new_synopsis = current.discussion.synopsis
    if old_synopsis and new_synopsis:
        if old_synopsis[:SYNOPSIS_PREFIX] not in new_synopsis:
            changes.append("NWS forecast discussion has been updated")
    if current.outlook.has_active_hazards and not previous.outlook.has_active_hazards:
        changes.append("Hazardous Weather Outlook now indicates active hazards")
    return changes


def detect_changes(current: Snapshot, previous: Optional[Snapshot]) -> ChangeSet:
    """새 스냅샷을 이전과 비교합니다. / Compare a new snapshot with the last one."""

    if previous is None:
        return ChangeSet(has_changes=True, alert_changes=[NO_BASELINE])

    condition_checks = (
        temperature_change(current.conditions, previous.conditions),
        visibility_change(current.conditions, previous.conditions),
        precipitation_change(current, previous),
        weather_change(current.conditions, previous.conditions),
    )
    alerts = alert_changes(current, previous)
    conditions = [change for change in condition_checks if change]
    forecast = forecast_changes(current, previous)
    return ChangeSet(
        has_changes=bool(alerts or conditions or forecast),
        alert_changes=alerts,
        condition_changes=conditions,
        forecast_changes=forecast,
    )
