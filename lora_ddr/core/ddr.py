"""DDR micro-protocol: request recognition, coordinate parsing, downlink encoding."""

from __future__ import annotations

import math
import re

from .. import constants
from .errors import BuildError, ParseError
from .models import Coordinates, DDRResponse, DownlinkMessage

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_MIN_DATARATE_LENGTH = (
    constants.DATARATE_PREFIX_LENGTH + constants.DATARATE_SUFFIX_LENGTH + 1
)


def _payload_text(payload: bytes) -> str:
    # Invalid bytes become U+FFFD so a mangled coordinate still fails as such.
    return payload.decode("utf-8", errors="replace")


def is_ddr_request(payload: bytes) -> bool:
    """Return whether ``payload`` has the ``DDR|<lat>|<lon>`` shape.

    Anything else is simply another kind of uplink sharing the topic, so this
    never raises.
    """

    text = _payload_text(payload)
    if not text.startswith(constants.DDR_HEADER):
        return False

    return text.count(constants.DDR_SEPARATOR) == 2


def _parse_decimal(value: str, field: str) -> float:
    if not _DECIMAL_RE.fullmatch(value):
        raise ParseError(f"invalid {field} in ddr request: {value!r}", field=field)

    number = float(value)
    if not math.isfinite(number):
        raise ParseError(f"invalid {field} in ddr request: {value!r}", field=field)
    return number


def parse_coordinates(payload: bytes) -> Coordinates:
    """Extract latitude and longitude from a recognised DDR request."""

    fields = _payload_text(payload).split(constants.DDR_SEPARATOR)
    if len(fields) != 3:
        raise ParseError("invalid ddr request")

    _header, latitude, longitude = fields
    return Coordinates(
        latitude=_parse_decimal(latitude, "latitude"),
        longitude=_parse_decimal(longitude, "longitude"),
    )


def extract_spreading_factor(datarate: str) -> int:
    """Pull the spreading factor out of a datarate such as ``SF7BW125``."""

    if len(datarate) < _MIN_DATARATE_LENGTH:
        raise BuildError(f"datarate too short: {datarate!r}")

    value = datarate[
        constants.DATARATE_PREFIX_LENGTH : len(datarate)
        - constants.DATARATE_SUFFIX_LENGTH
    ]
    if not (value.isascii() and value.isdigit()):
        raise BuildError(f"datarate has no numeric spreading factor: {datarate!r}")

    spreading_factor = int(value)
    if not (
        constants.MIN_SPREADING_FACTOR
        <= spreading_factor
        <= constants.MAX_SPREADING_FACTOR
    ):
        raise BuildError(
            f"spreading factor {spreading_factor} outside "
            f"{constants.MIN_SPREADING_FACTOR}..{constants.MAX_SPREADING_FACTOR}"
        )
    return spreading_factor


def build_downlink(response: DDRResponse) -> DownlinkMessage:
    """Encode the DDR service answer as a confirmed ``DDR|<sf>`` downlink."""

    spreading_factor = extract_spreading_factor(response.datarate)
    payload = (
        f"{constants.DDR_HEADER}{constants.DDR_SEPARATOR}{spreading_factor}"
    ).encode("ascii")
    return DownlinkMessage(
        payload=payload, port=constants.DDR_PORT, confirmed=True
    )
