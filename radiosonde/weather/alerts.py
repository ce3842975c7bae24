"""경보 분류기입니다. / Alert classifier."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Alert, AlertSeverity

LOGGER = logging.getLogger("radiosonde.alerts")

ICON_WARNING = "⚠️"
ICON_EXTREME = "🚨"

SEVERITY_TIERS: Dict[str, AlertSeverity] = {
    "Extreme": AlertSeverity.HIGH,
    "Severe": AlertSeverity.HIGH,
    "Moderate": AlertSeverity.MODERATE,
}

# Evaluated in order; a later match overwrites an earlier one.
EVENT_ICONS: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("flood",), "🌊"),
    (("wind",), "💨"),
    (("snow",), "❄️"),
    (("ice", "freez"), "🧊"),
    (("thunder",), "⛈️"),
    (("tornado",), "🌪️"),
)


def classify_severity(raw: str | None) -> AlertSeverity:
    """원시 등급을 정규화합니다. / Normalize a raw severity value."""

    return SEVERITY_TIERS.get(raw or "", AlertSeverity.LOW)


def select_icon(event: str, raw_severity: str | None) -> str:
    """경보 아이콘을 고릅니다. / Pick the alert icon tag."""

    icon = ICON_EXTREME if raw_severity == "Extreme" else ICON_WARNING
    lowered = event.lower()
    for keywords, keyword_icon in EVENT_ICONS:
        if any(keyword in lowered for keyword in keywords):
            icon = keyword_icon
    return icon


def _parse_optional_timestamp(value: str | None) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        LOGGER.warning("alert_timestamp_invalid", extra={"value": value})
        return None


def classify_alert(properties: Dict[str, Any]) -> Alert:
    """원시 경보를 분류합니다. / Classify one raw alert record."""

    event = properties.get("event") or "Weather Alert"
    raw_severity = properties.get("severity")
    return Alert(
        event=event,
        severity=classify_severity(raw_severity),
        icon=select_icon(event, raw_severity),
        headline=properties.get("headline") or "",
        description=properties.get("description") or "",
        effective=_parse_optional_timestamp(properties.get("effective")),
        expires=_parse_optional_timestamp(properties.get("expires")),
        areas=properties.get("areaDesc") or "",
    )


def parse_alerts(payload: Dict[str, Any]) -> List[Alert]:
    """GeoJSON 경보 목록을 변환합니다. / Convert a GeoJSON alert collection."""

    return [
        classify_alert(feature.get("properties") or {})
        for feature in payload.get("features") or []
    ]


def has_active_warnings(alerts: Iterable[Alert]) -> bool:
    """경고 수준 경보가 있는지 봅니다. / Check for warning-level alerts."""

    return any(
        "warning" in alert.event.lower() or alert.severity == AlertSeverity.HIGH
        for alert in alerts
    )
