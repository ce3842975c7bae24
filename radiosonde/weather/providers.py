"""날씨 소스 어댑터입니다. / Weather source adapters."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import HttpSettings, NwsSettings, TempestSettings
from .alerts import parse_alerts
from .forecast import parse_daily_forecast, parse_hourly_periods
from .models import (
    Alert,
    DailyForecast,
    ForecastDiscussion,
    HazardOutlook,
    HourlyPeriod,
    PressureTrend,
    SensorObservation,
    StationObservation,
)
from .observations import parse_observation_history
from .sections import parse_discussion, parse_outlook
from .units import celsius_to_fahrenheit, degrees_to_cardinal, mm_to_inches, mps_to_mph

LOGGER = logging.getLogger("radiosonde.providers")


class WeatherProviderError(Exception):
    """날씨 소스 오류입니다. / Weather source error."""


class SourceUnavailableError(WeatherProviderError):
    """재시도 후에도 실패한 소스입니다. / Source failed after its retry budget."""


class HttpSource:
    """재시도를 포함한 HTTP 소스입니다. / HTTP source with bounded retry."""

    name: str = "source"

    def __init__(self, client: httpx.AsyncClient, http: HttpSettings) -> None:
        self.client = client
        self.http = http

    def build_headers(self) -> Dict[str, str]:
        """요청 헤더를 작성합니다. / Build request headers."""

        return {}

    async def get(self, url: str, params: Dict[str, Any] | None = None) -> httpx.Response:
        """리트라이 포함 GET 요청입니다. / Perform a GET with retry."""

        retryer = AsyncRetrying(
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
            stop=stop_after_attempt(self.http.retries),
            retry=retry_if_exception_type(httpx.HTTPError),
            reraise=True,
        )
        try:
            async for attempt in retryer:
                with attempt:
                    response = await self.client.get(
                        url,
                        params=params,
                        headers=self.build_headers(),
                        timeout=self.http.timeout_seconds,
                    )
                    response.raise_for_status()
                    return response
        except httpx.HTTPError as exc:
            LOGGER.warning(
                "source_failed",
                extra={"source": self.name, "url": url, "error": str(exc)},
            )
            raise SourceUnavailableError(f"{self.name}: {exc}") from exc
        raise SourceUnavailableError(  # pragma: no cover - safety net
            f"{self.name}: retry loop produced no result"
        )


class TempestSource(HttpSource):
    """템페스트 센서 어댑터입니다. / Tempest sensor adapter."""

    name = "tempest"

    def __init__(
        self,
        client: httpx.AsyncClient,
        http: HttpSettings,
        settings: TempestSettings,
    ) -> None:
        super().__init__(client, http)
        self.settings = settings

    async def fetch_observation(self) -> Optional[SensorObservation]:
        """센서 관측을 가져옵니다. / Fetch the latest sensor observation."""

        if not self.settings.token:
            LOGGER.error("tempest_token_missing")
            return None
        url = f"{self.settings.base_url}/observations/station/{self.settings.station_id}"
        response = await self.get(url, params={"token": self.settings.token})
        return parse_tempest_payload(response.json())


def parse_tempest_payload(payload: Dict[str, Any]) -> SensorObservation:
    """템페스트 응답을 변환합니다. / Transform a Tempest response."""

    observations = payload.get("obs") or []
    if not observations:
        raise SourceUnavailableError("tempest: no observation data returned")
    obs = observations[0]
    trend = obs.get("pressure_trend")
    if trend not in {member.value for member in PressureTrend}:
        trend = PressureTrend.STEADY.value
    return SensorObservation(
        timestamp=datetime.fromtimestamp(int(obs["timestamp"]), tz=timezone.utc),
        temperature_c=float(obs["air_temperature"]),
        temperature_f=celsius_to_fahrenheit(float(obs["air_temperature"])),
        humidity=float(obs["relative_humidity"]),
        pressure_mb=float(obs["sea_level_pressure"]),
        pressure_trend=PressureTrend(trend),
        wind_speed_mph=mps_to_mph(float(obs["wind_avg"])),
        wind_gust_mph=mps_to_mph(float(obs["wind_gust"])),
        wind_direction=degrees_to_cardinal(float(obs["wind_direction"])),
        feels_like_c=float(obs["feels_like"]),
        feels_like_f=celsius_to_fahrenheit(float(obs["feels_like"])),
        dew_point_c=float(obs["dew_point"]),
        dew_point_f=celsius_to_fahrenheit(float(obs["dew_point"])),
        uv=float(obs.get("uv") or 0.0),
        precip_today_in=mm_to_inches(float(obs.get("precip_accum_local_day") or 0.0)),
        precip_yesterday_in=mm_to_inches(
            float(obs.get("precip_accum_local_yesterday") or 0.0)
        ),
    )


class NwsSource(HttpSource):
    """기상청 어댑터입니다. / National Weather Service adapter."""

    name = "nws"

    def __init__(
        self,
        client: httpx.AsyncClient,
        http: HttpSettings,
        settings: NwsSettings,
        latitude: float,
        longitude: float,
    ) -> None:
        super().__init__(client, http)
        self.settings = settings
        self.latitude = latitude
        self.longitude = longitude

    def build_headers(self) -> Dict[str, str]:
        """요청 헤더를 작성합니다. / Build request headers."""

        return {"User-Agent": self.settings.user_agent, "accept": "application/geo+json"}

    @property
    def point(self) -> str:
        """위경도 문자열입니다. / Latitude/longitude point string."""

        return f"{self.latitude:.4f},{self.longitude:.4f}"

    async def _product(self, product: str, site: str) -> str:
        response = await self.get(
            f"{self.settings.products_base_url}/product.php",
            params={
                "site": site,
                "issuedby": self.settings.office,
                "product": product,
                "format": "TXT",
                "version": 1,
            },
        )
        return response.text

    async def fetch_discussion(self) -> Optional[ForecastDiscussion]:
        """예보 토의를 가져옵니다. / Fetch the area forecast discussion."""

        html = await self._product("AFD", self.settings.office)
        return parse_discussion(html)

    async def fetch_outlook(self) -> Optional[HazardOutlook]:
        """위험 전망을 가져옵니다. / Fetch the hazardous weather outlook."""

        html = await self._product("HWO", "NWS")
        return parse_outlook(html)

    async def fetch_observation_history(self, now: datetime) -> Optional[StationObservation]:
        """관측소 이력을 가져옵니다. / Fetch the station observation history."""

        station = self.settings.station_id
        response = await self.get(f"{self.settings.observations_base_url}/{station}.html")
        return parse_observation_history(
            response.text,
            station,
            now,
            station_name=self.settings.station_name,
        )

    async def fetch_forecasts(self) -> Tuple[List[DailyForecast], List[HourlyPeriod]]:
        """일별/시간별 예보를 가져옵니다. / Fetch daily and hourly forecasts."""

        points = await self.get(f"{self.settings.api_base_url}/points/{self.point}")
        properties = points.json().get("properties") or {}
        try:
            forecast_url = properties["forecast"]
            hourly_url = properties["forecastHourly"]
        except KeyError as exc:
            raise SourceUnavailableError(f"nws: points response missing {exc}") from exc
        daily = await self.get(forecast_url)
        hourly = await self.get(hourly_url)
        return parse_daily_forecast(daily.json()), parse_hourly_periods(hourly.json())

    async def fetch_alerts(self) -> List[Alert]:
        """활성 경보를 가져옵니다. / Fetch active alerts."""

        response = await self.get(
            f"{self.settings.api_base_url}/alerts/active",
            params={"point": self.point},
        )
        return parse_alerts(response.json())
