"""드론 비행 창 분석기입니다. / Drone flight window analyzer.

Each hour starts at ``excellent`` and runs through an ordered chain of rules.
A rule may report a tier and an issue; the hour keeps the stricter of its
running rating and the rule's tier, so a rating can only be downgraded.
"""

from __future__ import annotations

import re
from datetime import date, tzinfo
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..weather.models import (
    FlightWindowReport,
    HourlyForecastPoint,
    HourlyPeriod,
    SuitabilityRating,
)

FIRST_HOUR = 6
LAST_HOUR = 23

RATING_ORDER: Sequence[SuitabilityRating] = (
    SuitabilityRating.EXCELLENT,
    SuitabilityRating.GOOD,
    SuitabilityRating.MARGINAL,
    SuitabilityRating.NO_GO,
)
FLYABLE = (SuitabilityRating.EXCELLENT, SuitabilityRating.GOOD)

RuleResult = Optional[Tuple[SuitabilityRating, str]]
Rule = Callable[[HourlyPeriod, int], RuleResult]


def parse_wind_speed(text: str) -> int:
    """풍속 문자열의 상한을 읽습니다. / Read the upper bound of a wind text."""

    numbers = [int(value) for value in re.findall(r"\d+", text or "")]
    return max(numbers) if numbers else 0


def stricter(left: SuitabilityRating, right: SuitabilityRating) -> SuitabilityRating:
    """더 엄격한 등급을 고릅니다. / Return the stricter of two ratings."""

    return max(left, right, key=lambda rating: RATING_ORDER.index(rating))


def wind_rule(period: HourlyPeriod, wind: int) -> RuleResult:
    """풍속 규칙입니다. / Wind speed rule."""

    if wind >= 25:
        return SuitabilityRating.NO_GO, f"Winds exceed operational limit ({wind} mph)"
    if wind >= 20:
        return SuitabilityRating.MARGINAL, f"High winds ({wind} mph)"
    if wind >= 15:
        return SuitabilityRating.GOOD, f"Moderate winds ({wind} mph)"
    return None


def precipitation_rule(period: HourlyPeriod, wind: int) -> RuleResult:
    """강수 규칙입니다. / Precipitation rule."""

    text = period.short_forecast.lower()
    chance = period.precip_probability
    if any(word in text for word in ("rain", "snow", "storm")) or chance >= 70:
        return SuitabilityRating.NO_GO, f"Precipitation likely ({chance:.0f}%)"
    if chance >= 40:
        return SuitabilityRating.MARGINAL, f"Chance of precipitation ({chance:.0f}%)"
    return None


def temperature_rule(period: HourlyPeriod, wind: int) -> RuleResult:
    """온도 규칙입니다. / Temperature rule."""

    temperature = period.temperature
    if temperature <= 20 or temperature >= 95:
        return (
            SuitabilityRating.GOOD,
            f"Extreme temperature ({temperature:.0f}°F) degrades battery/thermal performance",
        )
    if temperature <= 32:
        return SuitabilityRating.GOOD, f"Cold ({temperature:.0f}°F) reduces battery life"
    return None


def fog_rule(period: HourlyPeriod, wind: int) -> RuleResult:
    """안개 규칙입니다. / Fog rule."""

    if "fog" in period.short_forecast.lower():
        return SuitabilityRating.NO_GO, "Visibility below minimum (fog)"
    return None


RULES: Sequence[Rule] = (wind_rule, precipitation_rule, temperature_rule, fog_rule)


def rate_hour(
    period: HourlyPeriod, rules: Sequence[Rule] = RULES
) -> Tuple[SuitabilityRating, List[str]]:
    """한 시간을 평가합니다. / Rate one forecast hour."""

    wind = parse_wind_speed(period.wind_speed)
    rating = SuitabilityRating.EXCELLENT
    issues: List[str] = []
    for rule in rules:
        result = rule(period, wind)
        if result is None:
            continue
        tier, issue = result
        rating = stricter(rating, tier)
        issues.append(issue)
    return rating, issues


def hour_label(hour: int) -> str:
    """12시간제 라벨입니다. / 12-hour clock label."""

    hour %= 24
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{display} {suffix}"


def window_label(start_hour: int, end_hour: int) -> str:
    """끝 시각을 제외한 창 라벨입니다. / Window label with an exclusive end."""

    return f"{hour_label(start_hour)}–{hour_label(end_hour + 1)}"


def best_window(points: Sequence[HourlyForecastPoint]) -> Optional[Tuple[int, int]]:
    """가장 긴 연속 비행 가능 구간입니다. / Longest contiguous flyable run.

    Ties resolve to the earliest run. Returns inclusive start and end hours.
    """

    best: Optional[Tuple[int, int]] = None
    run_start: Optional[int] = None
    previous_hour: Optional[int] = None
    for point in points:
        flyable = point.rating in FLYABLE
        contiguous = previous_hour is not None and point.hour == previous_hour + 1
        if not flyable:
            run_start = None
        elif run_start is None or not contiguous:
            run_start = point.hour
        if flyable and run_start is not None:
            length = point.hour - run_start + 1
            if best is None or length > best[1] - best[0] + 1:
                best = (run_start, point.hour)
        previous_hour = point.hour
    return best


def summarize(flyable_hours: int, window: Optional[str]) -> str:
    """요약 문장을 만듭니다. / Build the one-line summary."""

    if flyable_hours == 0:
        return "No suitable flying conditions today"
    if flyable_hours >= 12:
        return f"Excellent day for flying ({flyable_hours} flyable hours)"
    if flyable_hours >= 6:
        summary = f"Good conditions for {flyable_hours} hours"
        return f"{summary}, best window {window}" if window else summary
    return f"Limited windows: {window}" if window else "Limited windows"


def rate_periods(
    periods: Iterable[HourlyPeriod], today: date, tz: tzinfo | None = None
) -> List[HourlyForecastPoint]:
    """오늘 06-23시 구간을 평가합니다. / Rate today's hours from 06:00 to 23:00."""

    points: List[HourlyForecastPoint] = []
    for period in periods:
        start = period.start_time.astimezone(tz) if tz else period.start_time
        if start.date() != today or not FIRST_HOUR <= start.hour <= LAST_HOUR:
            continue
        rating, issues = rate_hour(period)
        points.append(
            HourlyForecastPoint(
                hour=start.hour,
                time_label=hour_label(start.hour),
                temperature=period.temperature,
                wind_speed=parse_wind_speed(period.wind_speed),
                wind_direction=period.wind_direction,
                precip_probability=period.precip_probability,
                short_forecast=period.short_forecast,
                rating=rating,
                issues=issues,
            )
        )
    return points


def analyze_flight_window(
    periods: Iterable[HourlyPeriod], today: date, tz: tzinfo | None = None
) -> FlightWindowReport:
    """하루 비행 창 보고서를 만듭니다. / Build the one-day flight window report."""

    points = rate_periods(periods, today, tz)
    flyable_hours = sum(1 for point in points if point.rating in FLYABLE)
    window = best_window(points)
    label = window_label(*window) if window else None
    return FlightWindowReport(
        day=today,
        hours=points,
        best_window=label,
        flyable_hours=flyable_hours,
        summary=summarize(flyable_hours, label),
    )
