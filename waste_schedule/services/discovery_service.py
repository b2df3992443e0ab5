"""
This module defines the DiscoveryRegistry, which decides what to publish for each sensor.

Home Assistant picks up sensors from configuration documents published on
homeassistant/sensor/<object_id>/config. Every sensor is registered once per
registry lifetime; afterwards only its state is refreshed.
"""
import json
import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional

from ..config import AVAILABILITY_TOPIC, DISCOVERY_PREFIX, PAYLOAD_AVAILABLE, PAYLOAD_NOT_AVAILABLE
from ..exceptions import EntityReportError, PublishError
from ..models import ScheduleEntry

logger = logging.getLogger(__name__)

VALUE_TEMPLATE = "{{ (strptime(value_json.next_empty, '%Y-%m-%d').date() - now().date()).days }}"

non_alphanumeric_pattern = re.compile(r"[^A-Za-z0-9]")


def sanitize(entity_key: str) -> str:
    """Replaces every non-alphanumeric character with an underscore."""
    return non_alphanumeric_pattern.sub("_", entity_key)


class SensorState(Enum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"


@dataclass
class SensorRecord:
    """Registration state of one sensor."""

    entity_key: str
    object_id: str
    config_topic: str
    state_topic: str
    config_published: bool = False

    @property
    def state(self) -> SensorState:
        return SensorState.REGISTERED if self.config_published else SensorState.UNREGISTERED


class DiscoveryRegistry:
    """
    Tracks which sensors have been announced and publishes their discovery and state.

    One registry is meant to live for the whole process so repeated passes do
    not republish discovery configuration or device availability.
    """

    def __init__(
        self,
        prefix: str = DISCOVERY_PREFIX,
        device_name: str = "Affaldvarme integration",
        sw_version: str = "1.0",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.prefix = prefix
        self.device = {
            "identifiers": [f"ha_{prefix}"],
            "name": device_name,
            "sw_version": sw_version,
            "model": "Standard",
            "manufacturer": "Your Garbage Bin Manufacturer",
        }
        self.clock = clock or (lambda: datetime.now().astimezone())
        self.records: Dict[str, SensorRecord] = {}
        self.device_announced = False
        self._lock = threading.Lock()

    def record_for(self, entity_key: str) -> SensorRecord:
        """Returns the record for an entity key, creating it on first sight."""
        with self._lock:
            record = self.records.get(entity_key)
            if record is None:
                segment = sanitize(entity_key)
                object_id = f"ha_{self.prefix}_{segment}"
                record = SensorRecord(
                    entity_key=entity_key,
                    object_id=object_id,
                    config_topic=f"homeassistant/sensor/{object_id}/config",
                    state_topic=f"garbage_bin/{segment}/status",
                )
                self.records[entity_key] = record
            return record

    def report(self, entry: ScheduleEntry, connection) -> SensorRecord:
        """
        Publishes everything the entry's sensor still needs.

        An unregistered sensor gets, in order: the device availability (once
        per registry), its discovery configuration and its state. A registered
        sensor only gets its state. Each step is committed as soon as it
        succeeds, so a later failure never repeats an earlier step.

        Args:
            entry: A normalized entry with a due date.
            connection: An open BrokerConnection (anything with publish()).

        Returns:
            The sensor's record.

        Raises:
            EntityReportError: If any publish for this entity fails. Its
                published count tells how many messages went out before the failure.
        """
        record = self.record_for(entry.entity_key)
        published = 0

        if record.state is SensorState.UNREGISTERED:
            published += self._announce_device(record, connection)
            self._publish_step(
                record, "discovery", connection, record.config_topic, self.config_payload(entry, record), published=published
            )
            record.config_published = True
            published += 1
            logger.info(f"Registered sensor '{record.entity_key}' on {record.config_topic}")

        self._publish_step(record, "state", connection, record.state_topic, self.state_payload(entry), published=published)
        return record

    def _announce_device(self, record: SensorRecord, connection) -> int:
        """Publishes the device availability unless already done. Returns the number of messages sent."""
        with self._lock:
            if self.device_announced:
                return 0
            self._publish_step(record, "availability", connection, AVAILABILITY_TOPIC, PAYLOAD_AVAILABLE, retain=True)
            self.device_announced = True
            logger.info(f"Announced device availability on {AVAILABILITY_TOPIC}")
            return 1

    def _publish_step(
        self,
        record: SensorRecord,
        step: str,
        connection,
        topic: str,
        payload: str,
        retain: bool = False,
        published: int = 0,
    ) -> None:
        try:
            connection.publish(topic, payload, retain=retain)
        except PublishError as e:
            logger.warning(f"Publishing {step} for '{record.entity_key}' failed: {e}")
            raise EntityReportError(record.entity_key, step, e, published=published) from e

    def config_payload(self, entry: ScheduleEntry, record: SensorRecord) -> str:
        """The discovery configuration document for a sensor."""
        return json.dumps(
            {
                "object_id": record.object_id,
                "unique_id": record.object_id,
                "name": entry.name,
                "state_topic": record.state_topic,
                "json_attributes_topic": record.state_topic,
                "value_template": VALUE_TEMPLATE,
                "availability_topic": AVAILABILITY_TOPIC,
                "payload_available": PAYLOAD_AVAILABLE,
                "payload_not_available": PAYLOAD_NOT_AVAILABLE,
                "unit_of_measurement": "days",
                "device": self.device,
                "icon": "mdi:recycle",
            }
        )

    def state_payload(self, entry: ScheduleEntry) -> str:
        """The state document for a sensor. last_update is refreshed on every call."""
        payload = {}
        if entry.bin_id is not None:
            payload["id"] = entry.bin_id
            payload["size"] = entry.size
            payload["frequency"] = entry.frequency
        payload["name"] = entry.name
        payload["next_empty"] = entry.due_date.strftime("%Y-%m-%d")
        payload["last_update"] = self.clock().isoformat()
        return json.dumps(payload)
