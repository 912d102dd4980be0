"""Constants used across the lora-ddr package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "lora-ddr"
DEFAULT_CONFIG_FILENAME = f".{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / DEFAULT_CONFIG_FILENAME

DEFAULT_MQTT_SERVER = "tcp://localhost:1883"
DEFAULT_MQTT_USERNAME = "admin"
DEFAULT_MQTT_PASSWORD = "admin"
DEFAULT_MQTT_CLIENT_ID = "lora-mqtt-id"
DEFAULT_MQTT_QOS = 0
DEFAULT_MQTT_TOPIC = "my_application/devices/+/up"

DEFAULT_DDR_URL = "http://localhost/lora/ddr/q"

# DDR micro-protocol, always carried on port 1.
#   uplink:   DDR|<lat>|<lon>   e.g. DDR|50.863978|4.678908
#   downlink: DDR|<sf>          e.g. DDR|7
DDR_HEADER = "DDR"
DDR_SEPARATOR = "|"
DDR_PORT = 1

UPLINK_SUFFIX = "up"
DOWNLINK_SUFFIX = "down"

# Datarate strings look like "SF7BW125".
DATARATE_PREFIX_LENGTH = 2
DATARATE_SUFFIX_LENGTH = 5
MIN_SPREADING_FACTOR = 7
MAX_SPREADING_FACTOR = 12
