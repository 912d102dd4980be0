"""Core primitives for lora-ddr."""

from .ddr import build_downlink, is_ddr_request, parse_coordinates
from .envelope import decode_uplink, encode_downlink
from .errors import (
    BuildError,
    DDRError,
    DDRLookupError,
    DecodeError,
    ParseError,
    RouteError,
)
from .models import Coordinates, DDRResponse, DownlinkMessage, UplinkMessage
from .protocols import DDRLookup, MessageHandler, MessageTransport
from .topics import downlink_topic

__all__ = [
    "BuildError",
    "Coordinates",
    "DDRError",
    "DDRLookup",
    "DDRLookupError",
    "DDRResponse",
    "DecodeError",
    "DownlinkMessage",
    "MessageHandler",
    "MessageTransport",
    "ParseError",
    "RouteError",
    "UplinkMessage",
    "build_downlink",
    "decode_uplink",
    "downlink_topic",
    "encode_downlink",
    "is_ddr_request",
    "parse_coordinates",
]
