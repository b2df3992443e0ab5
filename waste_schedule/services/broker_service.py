"""
This module wraps the paho-mqtt client used to talk to the broker.
"""
import logging
import threading
from typing import List, Optional

import paho.mqtt.client as mqtt
from paho.mqtt.enums import CallbackAPIVersion

from ..config import (
    AVAILABILITY_TOPIC,
    MQTT_CONNECT_TIMEOUT_SECONDS,
    MQTT_KEEPALIVE_SECONDS,
    PAYLOAD_NOT_AVAILABLE,
)
from ..exceptions import BrokerConnectionError, PublishError, SessionTerminationError

logger = logging.getLogger(__name__)

QOS_AT_LEAST_ONCE = 1


class BrokerConnection:
    """
    A single broker session: connect, publish, then terminate.

    The last will marks the shared availability topic offline when the
    session drops without an orderly disconnect.
    """

    def __init__(
        self,
        host: str,
        port: int,
        client_id: str,
        username: str = "",
        password: str = "",
        keepalive: int = MQTT_KEEPALIVE_SECONDS,
        timeout: float = MQTT_CONNECT_TIMEOUT_SECONDS,
        client: Optional[mqtt.Client] = None,
    ):
        self.host = host
        self.port = port
        self.keepalive = keepalive
        self.timeout = timeout

        self.client = client or mqtt.Client(callback_api_version=CallbackAPIVersion.VERSION2, client_id=client_id)
        if username:
            self.client.username_pw_set(username, password or None)
        self.client.will_set(AVAILABILITY_TOPIC, PAYLOAD_NOT_AVAILABLE, qos=QOS_AT_LEAST_ONCE, retain=True)

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        self._connected = threading.Event()
        self._closed = threading.Event()
        self._connect_error: Optional[str] = None
        self._pending: List[mqtt.MQTTMessageInfo] = []
        self._loop_running = False
        self._session_open = False

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            self._connect_error = str(reason_code)
        self._connected.set()

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._closed.set()

    def open(self) -> None:
        """
        Connects to the broker and waits for the broker to accept the session.

        Raises:
            BrokerConnectionError: If the broker is unreachable or refuses the session.
        """
        logger.info(f"Connecting to MQTT broker at {self.host}:{self.port}")
        try:
            self.client.connect(self.host, self.port, self.keepalive)
        except (OSError, ValueError) as e:
            raise BrokerConnectionError(f"Could not connect to {self.host}:{self.port}: {e}") from e

        self._session_open = True
        self.client.loop_start()
        self._loop_running = True

        if not self._connected.wait(self.timeout):
            self.close()
            raise BrokerConnectionError(f"Broker at {self.host}:{self.port} did not accept the connection in time")
        if self._connect_error:
            self.close()
            raise BrokerConnectionError(f"Broker refused the connection: {self._connect_error}")

    def publish(self, topic: str, payload: str, retain: bool = False) -> None:
        """
        Queues a message with QoS 1.

        Raises:
            PublishError: If the client does not accept the message.
        """
        try:
            info = self.client.publish(topic, payload, qos=QOS_AT_LEAST_ONCE, retain=retain)
        except ValueError as e:
            raise PublishError(f"Publishing to {topic} failed: {e}") from e

        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(f"Publishing to {topic} failed: {mqtt.error_string(info.rc)}")
        logger.debug(f"Published to {topic} (retain={retain})")
        self._pending.append(info)

    def terminate(self) -> None:
        """
        Asks the broker for a disconnection and drains the network loop until closed.

        Everything already queued is sent before the session closes.

        Raises:
            SessionTerminationError: If the session could not be closed cleanly.
        """
        pending, self._pending = self._pending, []
        try:
            for info in pending:
                info.wait_for_publish(self.timeout)
        except (RuntimeError, ValueError) as e:
            self.close()
            raise SessionTerminationError(f"Failed to flush queued messages: {e}") from e

        undelivered = [info.mid for info in pending if not info.is_published()]
        if undelivered:
            self.close()
            raise SessionTerminationError(f"Messages {undelivered} were not delivered before disconnect")

        rc = self.client.disconnect()
        self._session_open = False
        if rc != mqtt.MQTT_ERR_SUCCESS:
            self.close()
            raise SessionTerminationError(f"Disconnect failed: {mqtt.error_string(rc)}")

        closed = self._closed.wait(self.timeout)
        self.close()
        if not closed:
            raise SessionTerminationError("Broker session did not close in time")
        logger.info("Disconnected from MQTT broker")

    def close(self) -> None:
        """
        Disconnects a session that was not terminated, then stops the network loop.
        Safe to call more than once.
        """
        if self._session_open:
            # Best effort, the session is being abandoned anyway.
            self.client.disconnect()
            self._session_open = False
        if self._loop_running:
            self.client.loop_stop()
            self._loop_running = False
