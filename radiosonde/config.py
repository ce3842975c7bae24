"""환경 및 설정 로더입니다. / Environment and configuration loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import Field, SecretStr, ValidationError

from .base import RadiosondeModel


class LocationSettings(RadiosondeModel):
    """관측 지점 설정입니다. / Monitored location settings."""

    name: str = "Buffalo, NY"
    latitude: float = Field(default=42.9054, ge=-90, le=90)
    longitude: float = Field(default=-78.6923, ge=-180, le=180)
    timezone: str = "America/New_York"


class HttpSettings(RadiosondeModel):
    """HTTP 호출 설정입니다. / HTTP call settings."""

    timeout_seconds: float = Field(default=10.0, gt=0)
    retries: int = Field(default=3, ge=1)


class NwsSettings(RadiosondeModel):
    """기상청 소스 설정입니다. / National Weather Service settings."""

    office: str = "BUF"
    station_id: str = "KBUF"
    station_name: str = "Buffalo Intl Airport"
    user_agent: str = "(Radiosonde Weather Email, github.com/radiosonde)"
    api_base_url: str = "https://api.weather.gov"
    products_base_url: str = "https://forecast.weather.gov"
    observations_base_url: str = "https://forecast.weather.gov/data/obhistory"


class TempestSettings(RadiosondeModel):
    """템페스트 센서 설정입니다. / Tempest sensor settings."""

    base_url: str = "https://swd.weatherflow.com/swd/rest"
    station_id: str = "36763"
    token: str | None = None


class AppConfig(RadiosondeModel):
    """애플리케이션 전체 설정입니다. / Application wide configuration."""

    location: LocationSettings = Field(default_factory=LocationSettings)
    nws: NwsSettings = Field(default_factory=NwsSettings)
    tempest: TempestSettings = Field(default_factory=TempestSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    state_path: Path = Path("/tmp/radiosonde-state.json")
    stale_after_hours: float = Field(default=2.0, gt=0)


class SourceSecrets(RadiosondeModel):
    """소스 시크릿 래퍼입니다. / Source secret wrapper."""

    tempest_token: SecretStr | None = None


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """YAML 설정을 읽습니다. / Load YAML configuration."""

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return data


def load_secrets_from_env() -> SourceSecrets:
    """환경 변수에서 시크릿을 적재합니다. / Load secrets from environment."""

    raw_value = os.getenv("TEMPEST_TOKEN")
    secret = SecretStr(raw_value) if raw_value else None
    return SourceSecrets(tempest_token=secret)


def merge_config(raw: Dict[str, Any], secrets: SourceSecrets) -> Dict[str, Any]:
    """환경과 파일 설정을 병합합니다. / Merge file config with secrets."""

    if secrets.tempest_token:
        tempest = dict(raw.get("tempest") or {})
        tempest["token"] = secrets.tempest_token.get_secret_value()
        raw["tempest"] = tempest
    return raw


def load_app_config(path: Path | None = None) -> AppConfig:
    """최종 앱 설정을 반환합니다. / Return final app configuration."""

    config_path = path or Path("config.yaml")
    raw = load_yaml_config(config_path) if config_path.exists() else {}
    secrets = load_secrets_from_env()
    merged = merge_config(raw, secrets)
    try:
        return AppConfig.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
