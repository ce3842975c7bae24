"""변경 감지 테스트입니다. / Change detection tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import pytest

from radiosonde.pipeline import should_notify
from radiosonde.state.changes import NO_BASELINE, detect_changes
from radiosonde.state.models import (
    AlertState,
    ChangeSet,
    ConditionsState,
    DiscussionState,
    OutlookState,
    PrecipState,
    Snapshot,
)

NOW = datetime(2025, 1, 15, 14, 0, tzinfo=timezone.utc)
SYNOPSIS = (
    "A strong area of low pressure will track across the Great Lakes tonight, "
    "bringing lake effect snow and gusty winds."
)


def _snapshot(**overrides: Any) -> Snapshot:
    conditions: Dict[str, Any] = {
        "temperature": 40.0,
        "wind": "W 10",
        "pressure": 1012.0,
        "weather": "Overcast",
        "visibility": 10.0,
    }
    conditions.update(overrides.pop("conditions", {}))
    return Snapshot(
        timestamp=overrides.pop("timestamp", NOW),
        alerts=AlertState(
            count=len(overrides.get("types", [])),
            types=overrides.pop("types", []),
        ),
        conditions=ConditionsState(**conditions),
        discussion=DiscussionState(synopsis=overrides.pop("synopsis", SYNOPSIS)),
        outlook=OutlookState(has_active_hazards=overrides.pop("hazards", False)),
        precip=PrecipState(today=overrides.pop("precip", 0.0)),
    )


def test_identical_snapshots_have_no_changes() -> None:
    """동일 스냅샷은 변경이 없습니다. / Identical snapshots report nothing."""

    snapshot = _snapshot(types=["Winter Storm Watch"], hazards=True, precip=0.3)
    changes = detect_changes(snapshot, snapshot.model_copy())
    assert changes == ChangeSet()


def test_no_baseline() -> None:
    """이전 스냅샷이 없으면 변경입니다. / No previous snapshot is a change."""

    changes = detect_changes(_snapshot(), None)
    assert changes.has_changes is True
    assert changes.alert_changes == [NO_BASELINE]
    assert changes.condition_changes == []
    assert changes.forecast_changes == []


def test_alert_categories_new_and_expired() -> None:
    """새 경보와 만료 경보입니다. / New and expired alert categories."""

    previous = _snapshot(types=["Winter Storm Watch"])
    current = _snapshot(types=["Winter Storm Warning"])
    changes = detect_changes(current, previous)
    assert changes.has_changes is True
    assert changes.alert_changes == [
        "NEW ALERTS: Winter Storm Warning",
        "EXPIRED: Winter Storm Watch",
    ]


def test_temperature_rise() -> None:
    """기온 상승 6°F입니다. / Temperature rises 6°F."""

    changes = detect_changes(
        _snapshot(conditions={"temperature": 46.0}), _snapshot()
    )
    assert changes.condition_changes == [
        "Temperature has risen 6°F (was 40°F, now 46°F)"
    ]
    assert changes.has_changes is True


def test_small_temperature_change_ignored() -> None:
    """작은 기온 변화는 무시합니다. / Small temperature swings are ignored."""

    changes = detect_changes(_snapshot(conditions={"temperature": 36.5}), _snapshot())
    assert changes.has_changes is False


def test_temperature_fall() -> None:
    """기온 하강입니다. / Temperature falls."""

    changes = detect_changes(_snapshot(conditions={"temperature": 33.0}), _snapshot())
    assert changes.condition_changes[0].startswith("Temperature has fallen 7°F")


@pytest.mark.parametrize(
    ("before", "after", "expected"),
    [
        (5.0, 2.0, ["Visibility dropped to 2 miles"]),
        (2.0, 4.0, []),
        (2.0, 6.0, ["Visibility improved to 6 miles"]),
        (4.0, 5.0, []),
        (3.0, 2.5, ["Visibility dropped to 2.5 miles"]),
    ],
)
def test_visibility_hysteresis(before: float, after: float, expected: list) -> None:
    """시정 히스테리시스입니다. / Visibility hysteresis."""

    changes = detect_changes(
        _snapshot(conditions={"visibility": after}),
        _snapshot(conditions={"visibility": before}),
    )
    assert changes.condition_changes == expected
    assert changes.has_changes is bool(expected)


def test_precipitation_increase() -> None:
    """강수 증가입니다. / Precipitation increase."""

    changes = detect_changes(_snapshot(precip=0.3), _snapshot(precip=0.2))
    assert changes.condition_changes == [
        'Additional 0.10" precipitation recorded (total today: 0.3")'
    ]
    rollover = detect_changes(_snapshot(precip=0.0), _snapshot(precip=0.5))
    assert rollover.has_changes is False


@pytest.mark.parametrize(
    ("before", "after", "expected"),
    [
        ("Overcast", "Light Snow", ["Snow has begun: Light Snow"]),
        ("Overcast", "Light Rain", ["Rain has begun: Light Rain"]),
        ("Light Rain", "Rain and Snow", ["Snow has begun: Rain and Snow"]),
        ("Light Snow", "Overcast", ['Conditions changed from "Light Snow" to "Overcast"']),
        ("", "Overcast", []),
        ("Overcast", "", []),
    ],
)
def test_weather_transitions(before: str, after: str, expected: list) -> None:
    """날씨 설명 전환입니다. / Weather description transitions."""

    changes = detect_changes(
        _snapshot(conditions={"weather": after}),
        _snapshot(conditions={"weather": before}),
    )
    assert changes.condition_changes == expected


def test_forecast_discussion_drift() -> None:
    """토의 접두어가 사라지면 갱신입니다. / Missing prefix means an update."""

    extended = detect_changes(
        _snapshot(synopsis=SYNOPSIS + " Snow ends Thursday."), _snapshot()
    )
    assert extended.forecast_changes == []

    rewritten = detect_changes(
        _snapshot(synopsis="High pressure builds in for the weekend."), _snapshot()
    )
    assert rewritten.forecast_changes == ["NWS forecast discussion has been updated"]

    emptied = detect_changes(_snapshot(synopsis=""), _snapshot())
    assert emptied.forecast_changes == []


def test_hazard_outlook_activation() -> None:
    """위험 전망 활성화입니다. / Hazard outlook turns active."""

    changes = detect_changes(_snapshot(hazards=True), _snapshot(hazards=False))
    assert changes.forecast_changes == [
        "Hazardous Weather Outlook now indicates active hazards"
    ]
    cleared = detect_changes(_snapshot(hazards=False), _snapshot(hazards=True))
    assert cleared.has_changes is False


def test_should_notify_staleness() -> None:
    """오래된 스냅샷은 알림을 유발합니다. / A stale snapshot triggers notify."""

    quiet = ChangeSet()
    previous = _snapshot(timestamp=NOW - timedelta(hours=1))
    assert should_notify(quiet, previous, NOW) is False
    stale = _snapshot(timestamp=NOW - timedelta(hours=2))
    assert should_notify(quiet, stale, NOW) is True
    assert should_notify(quiet, None, NOW) is True
    assert should_notify(ChangeSet(has_changes=True), previous, NOW) is True


def test_should_notify_mixed_timestamp_awareness() -> None:
    """naive 시각은 UTC로 봅니다. / Naive timestamps compare as UTC."""

    quiet = ChangeSet()
    naive_recent = _snapshot(timestamp=(NOW - timedelta(hours=1)).replace(tzinfo=None))
    assert should_notify(quiet, naive_recent, NOW) is False
    naive_stale = _snapshot(timestamp=(NOW - timedelta(hours=3)).replace(tzinfo=None))
    assert should_notify(quiet, naive_stale, NOW) is True
    aware_stale = _snapshot(timestamp=NOW - timedelta(hours=3))
    assert should_notify(quiet, aware_stale, NOW.replace(tzinfo=None)) is True
