"""
This module builds the runtime settings from environment variables.
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from waste_schedule import config
from waste_schedule.exceptions import ConfigurationError
from waste_schedule.models import AddressId, AddressSpec, TraditionalAddress

SOURCES = ("calendar", "markup")


@dataclass(frozen=True)
class MqttSettings:
    host: str
    port: int
    client_id: str
    username: str = ""
    password: str = ""


@dataclass(frozen=True)
class Settings:
    mqtt: MqttSettings
    address: AddressSpec
    source: str = "calendar"
    base_url: str = config.AFFALDVARME_BASE_URL
    lookup_url: str = config.ADDRESS_LOOKUP_URL
    discovery_prefix: str = config.DISCOVERY_PREFIX
    interval_hours: float = config.SYNC_INTERVAL_HOURS
    http_timeout: int = config.HTTP_TIMEOUT_SECONDS


def _read_address(environ: Mapping[str, str]) -> AddressSpec:
    address_id = environ.get("AFFALDVARME_ADDRESS_ID")
    if address_id:
        return AddressId(id=address_id)

    keys = {
        "street_name": "AFFALDVARME_STREET_NAME",
        "street_no": "AFFALDVARME_STREET_NO",
        "postal_code": "AFFALDVARME_POSTAL_CODE",
        "city": "AFFALDVARME_CITY",
    }
    values = {field: environ.get(key, "").strip() for field, key in keys.items()}
    missing = [keys[field] for field, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Set AFFALDVARME_ADDRESS_ID or all of {', '.join(keys.values())} (missing: {', '.join(missing)})"
        )
    return TraditionalAddress(**values)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Reads the settings from the environment.

    Raises:
        ConfigurationError: If a required value is missing or invalid.
    """
    environ = os.environ if environ is None else environ

    source = environ.get("AFFALDVARME_SOURCE", config.SCHEDULE_SOURCE).lower()
    if source not in SOURCES:
        raise ConfigurationError(f"AFFALDVARME_SOURCE must be one of {', '.join(SOURCES)}, got '{source}'")

    default_base_url = config.AFFALDVARME_MARKUP_URL if source == "markup" else config.AFFALDVARME_BASE_URL
    base_url_key = "AFFALDVARME_MARKUP_URL" if source == "markup" else "AFFALDVARME_BASE_URL"

    try:
        mqtt = MqttSettings(
            host=environ.get("MQTT_HOST", config.MQTT_HOST),
            port=int(environ.get("MQTT_PORT", config.MQTT_PORT)),
            client_id=environ.get("MQTT_CLIENT_ID", config.MQTT_CLIENT_ID),
            username=environ.get("MQTT_USERNAME", config.MQTT_USERNAME),
            password=environ.get("MQTT_PASSWORD", config.MQTT_PASSWORD),
        )
        interval_hours = float(environ.get("SYNC_INTERVAL_HOURS", config.SYNC_INTERVAL_HOURS))
        http_timeout = int(environ.get("HTTP_TIMEOUT_SECONDS", config.HTTP_TIMEOUT_SECONDS))
    except ValueError as e:
        raise ConfigurationError(f"Invalid numeric setting: {e}") from e

    if interval_hours <= 0:
        raise ConfigurationError("SYNC_INTERVAL_HOURS must be positive")

    return Settings(
        mqtt=mqtt,
        address=_read_address(environ),
        source=source,
        base_url=environ.get(base_url_key, default_base_url),
        lookup_url=environ.get("ADDRESS_LOOKUP_URL", config.ADDRESS_LOOKUP_URL),
        discovery_prefix=environ.get("DISCOVERY_PREFIX", config.DISCOVERY_PREFIX),
        interval_hours=interval_hours,
        http_timeout=http_timeout,
    )
