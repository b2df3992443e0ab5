"""
This module provides a factory for creating and configuring the application's core components.
"""

from waste_schedule.facade import SyncFacade
from waste_schedule.services.address_service import AddressService
from waste_schedule.services.broker_service import BrokerConnection
from waste_schedule.services.discovery_service import DiscoveryRegistry
from waste_schedule.services.markup_service import MarkupScheduleSource
from waste_schedule.services.schedule_service import CalendarScheduleSource, ScheduleSource

from .settings import MqttSettings, Settings

SOURCE_TYPES = {
    "calendar": CalendarScheduleSource,
    "markup": MarkupScheduleSource,
}


def create_schedule_source(settings: Settings) -> ScheduleSource:
    """Builds the schedule source variant selected in the settings."""
    address_service = AddressService(lookup_url=settings.lookup_url, timeout=settings.http_timeout)
    source_type = SOURCE_TYPES[settings.source]
    return source_type(
        base_url=settings.base_url,
        address_service=address_service,
        timeout=settings.http_timeout,
    )


def create_facade(settings: Settings) -> SyncFacade:
    """
    Initializes and returns the SyncFacade with its schedule source.
    """
    return SyncFacade(schedule_source=create_schedule_source(settings))


def create_registry(settings: Settings) -> DiscoveryRegistry:
    """The registry lives for the whole process, create it once."""
    return DiscoveryRegistry(prefix=settings.discovery_prefix)


def create_connection(mqtt: MqttSettings) -> BrokerConnection:
    """Returns a new, not yet opened, broker session."""
    return BrokerConnection(
        host=mqtt.host,
        port=mqtt.port,
        client_id=mqtt.client_id,
        username=mqtt.username,
        password=mqtt.password,
    )
