"""
This module contains configuration settings for the application.
"""
import os
import logging

# MQTT broker
MQTT_HOST = os.environ.get("MQTT_HOST", "localhost")
MQTT_PORT = int(os.environ.get("MQTT_PORT", 1883))
MQTT_USERNAME = os.environ.get("MQTT_USERNAME", "")
MQTT_PASSWORD = os.environ.get("MQTT_PASSWORD", "")
MQTT_CLIENT_ID = os.environ.get("MQTT_CLIENT_ID", "ha_mitaffald")
MQTT_KEEPALIVE_SECONDS = int(os.environ.get("MQTT_KEEPALIVE_SECONDS", 60))
MQTT_CONNECT_TIMEOUT_SECONDS = float(os.environ.get("MQTT_CONNECT_TIMEOUT_SECONDS", 10))

# Home Assistant discovery
DISCOVERY_PREFIX = os.environ.get("DISCOVERY_PREFIX", "affaldvarme")
AVAILABILITY_TOPIC = "garbage_bin/availability"
PAYLOAD_AVAILABLE = "online"
PAYLOAD_NOT_AVAILABLE = "offline"

# Schedule source: "calendar" (JSON API) or "markup" (legacy HTML page)
SCHEDULE_SOURCE = os.environ.get("AFFALDVARME_SOURCE", "calendar")

# API URLs
AFFALDVARME_BASE_URL = os.environ.get("AFFALDVARME_BASE_URL", "https://portal-api.kredslob.dk")
AFFALDVARME_MARKUP_URL = os.environ.get("AFFALDVARME_MARKUP_URL", "https://mitaffald.affaldvarme.dk")
ADDRESS_LOOKUP_URL = os.environ.get("ADDRESS_LOOKUP_URL", "https://api.dataforsyningen.dk")
HTTP_TIMEOUT_SECONDS = int(os.environ.get("HTTP_TIMEOUT_SECONDS", 10))

# Synchronization interval in hours
SYNC_INTERVAL_HOURS = float(os.environ.get("SYNC_INTERVAL_HOURS", 24))

# Logging
LOG_LEVEL = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
LOG_FILE_PATH = os.environ.get("LOG_FILE_PATH")
