"""센서 단위 변환입니다. / Sensor unit conversions."""

from __future__ import annotations

CARDINALS = (
    "N",
    "NNE",
    "NE",
    "ENE",
    "E",
    "ESE",
    "SE",
    "SSE",
    "S",
    "SSW",
    "SW",
    "WSW",
    "W",
    "WNW",
    "NW",
    "NNW",
)


def _half_up(value: float, digits: int = 0) -> float:
    scale = 10**digits
    return float(int(value * scale + (0.5 if value >= 0 else -0.5))) / scale


def celsius_to_fahrenheit(celsius: float) -> float:
    """섭씨를 화씨로 변환합니다. / Convert Celsius to Fahrenheit."""

    return _half_up(celsius * 9 / 5 + 32, 1)


def degrees_to_cardinal(degrees: float) -> str:
    """방위각을 16방위로 변환합니다. / Convert bearing to 16-point cardinal."""

    index = int(_half_up(degrees / 22.5)) % 16
    return CARDINALS[index]


def mm_to_inches(mm: float) -> float:
    """밀리미터를 인치로 변환합니다. / Convert millimetres to inches."""

    return _half_up(mm / 25.4, 2)


def mps_to_mph(mps: float) -> int:
    """m/s를 mph로 변환합니다. / Convert metres per second to mph."""

    return int(_half_up(mps * 2.237))
