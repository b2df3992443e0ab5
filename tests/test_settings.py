import pytest

from bin_sync.settings import load_settings
from waste_schedule.exceptions import ConfigurationError
from waste_schedule.models import AddressId, TraditionalAddress


def test_load_settings_with_address_id():
    settings = load_settings(
        {
            "MQTT_HOST": "broker.local",
            "MQTT_PORT": "1884",
            "MQTT_USERNAME": "ha",
            "MQTT_PASSWORD": "secret",
            "AFFALDVARME_ADDRESS_ID": "07514448_100_______",
            "SYNC_INTERVAL_HOURS": "6",
        }
    )

    assert settings.mqtt.host == "broker.local"
    assert settings.mqtt.port == 1884
    assert settings.mqtt.username == "ha"
    assert settings.address == AddressId(id="07514448_100_______")
    assert settings.source == "calendar"
    assert settings.interval_hours == 6


def test_load_settings_with_traditional_address():
    settings = load_settings(
        {
            "AFFALDVARME_STREET_NAME": "Kongevejen",
            "AFFALDVARME_STREET_NO": "100",
            "AFFALDVARME_POSTAL_CODE": "8000",
            "AFFALDVARME_CITY": "Aarhus C",
        }
    )

    assert settings.address == TraditionalAddress("Kongevejen", "100", "8000", "Aarhus C")


def test_load_settings_markup_source_uses_markup_url():
    settings = load_settings(
        {
            "AFFALDVARME_ADDRESS_ID": "1",
            "AFFALDVARME_SOURCE": "Markup",
            "AFFALDVARME_MARKUP_URL": "http://mitaffald.test",
        }
    )

    assert settings.source == "markup"
    assert settings.base_url == "http://mitaffald.test"


def test_load_settings_missing_address_raises():
    with pytest.raises(ConfigurationError, match="AFFALDVARME_CITY"):
        load_settings({"AFFALDVARME_STREET_NAME": "Kongevejen", "AFFALDVARME_STREET_NO": "100", "AFFALDVARME_POSTAL_CODE": "8000"})


@pytest.mark.parametrize(
    "overrides",
    [
        {"AFFALDVARME_SOURCE": "ical"},
        {"MQTT_PORT": "not-a-port"},
        {"SYNC_INTERVAL_HOURS": "0"},
    ],
)
def test_load_settings_invalid_values_raise(overrides):
    with pytest.raises(ConfigurationError):
        load_settings({"AFFALDVARME_ADDRESS_ID": "1", **overrides})
