"""Domain models for the DDR pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .. import constants


@dataclass(frozen=True, slots=True)
class UplinkMessage:
    port: int
    payload: bytes
    # Remaining network-server fields (device ids, counters, radio metadata).
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DownlinkMessage:
    payload: bytes
    port: int = constants.DDR_PORT
    confirmed: bool = True


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class DDRResponse:
    datarate: str
