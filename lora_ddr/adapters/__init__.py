"""Adapter modules for external integrations."""

from .ddr_service import DDRServiceClient, build_lookup_url
from .mqtt import MQTTClient, MQTTConnectionError

__all__ = [
    "DDRServiceClient",
    "MQTTClient",
    "MQTTConnectionError",
    "build_lookup_url",
]
