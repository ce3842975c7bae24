"""관측 이력 표 파서입니다. / Observation history table parser.

Table columns (0-indexed)::

    0 date, 1 time, 2 wind, 3 visibility, 4 weather, 5 sky,
    6 air temp, 7 dew point, 8 6hr max, 9 6hr min, 10 humidity,
    11 wind chill, 12 heat index, 13 altimeter, 14 sea level,
    15 1hr precip, 16 3hr precip, 17 6hr precip

Rows are listed newest first.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import List, Optional

from bs4 import BeautifulSoup

from .models import StationObservation

LOGGER = logging.getLogger("radiosonde.observations")

MIN_COLUMNS = 16
PRECIP_CEILING = 10.0

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")


def parse_or(text: str, default: float) -> float:
    """선행 숫자를 읽거나 기본값을 돌려줍니다. / Parse leading number or default."""

    match = _LEADING_NUMBER.match(text.strip())
    if not match:
        return default
    return float(match.group(0))


def parse_day(text: str) -> Optional[int]:
    """날짜 칸의 일자를 읽습니다. / Read the day-of-month cell."""

    match = re.match(r"^\d+", text.strip())
    return int(match.group(0)) if match else None


def precip_value(text: str) -> float:
    """유효한 1시간 강수량만 돌려줍니다. / Return a usable 1-hour precip value.

    Trace markers, missing-data sentinels and out-of-range numbers count
    as zero.
    """

    value = parse_or(text, 0.0)
    if 0 < value < PRECIP_CEILING:
        return value
    return 0.0


def _cell_texts(row) -> List[str]:
    return [" ".join(cell.get_text(" ").split()) for cell in row.find_all("td")]


def parse_observation_history(
    html: str,
    station_id: str,
    now: datetime,
    station_name: str | None = None,
) -> Optional[StationObservation]:
    """최신 관측과 강수 합계를 만듭니다. / Build latest observation with precip totals."""

    today = now.day
    yesterday = (now - timedelta(days=1)).day
    today_precip = 0.0
    yesterday_precip = 0.0
    current: Optional[StationObservation] = None

    soup = BeautifulSoup(html, "html.parser")
    for row in soup.find_all("tr"):
        cells = _cell_texts(row)
        if len(cells) < MIN_COLUMNS:
            continue
        day = parse_day(cells[0])
        if day is None:
            continue

        if current is None and day == today:
            current = StationObservation(
                station_id=station_id,
                station_name=station_name or station_id,
                observation_time=cells[1],
                temperature=parse_or(cells[6], 0.0),
                dew_point=parse_or(cells[7], 0.0),
                humidity=parse_or(cells[10], 0.0),
                wind=cells[2] or "Calm",
                visibility=parse_or(cells[3], 10.0),
                weather=cells[4] or "Fair",
                sky=cells[5] or "Clear",
                pressure_in=parse_or(cells[13], 0.0),
                pressure_mb=parse_or(cells[14], 0.0),
            )

        precip = precip_value(cells[15])
        if day == today:
            today_precip += precip
        elif day == yesterday:
            yesterday_precip += precip

    if current is None:
        LOGGER.warning(
            "observation_parse_failed",
            extra={"station": station_id, "reason": "no row for today"},
        )
        return None
    return current.model_copy(
        update={
            "precip_today": round(today_precip, 2),
            "precip_yesterday": round(yesterday_precip, 2),
        }
    )
