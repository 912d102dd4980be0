"""JSON envelope codec for network-server uplinks and downlinks.

Uplinks arrive as a JSON object holding at least ``port`` and ``payload``;
``payload`` carries the device bytes base64 encoded. Any other keys are kept
as opaque metadata. Downlinks are emitted in the same shape with an extra
``confirmed`` flag.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict

from .errors import DecodeError
from .models import DownlinkMessage, UplinkMessage


def decode_uplink(body: bytes) -> UplinkMessage:
    try:
        document = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"Uplink body is not valid JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise DecodeError("Uplink body must be a JSON object")

    metadata: Dict[str, Any] = dict(document)
    port = metadata.pop("port", 0)
    raw_payload = metadata.pop("payload", None)

    if isinstance(port, bool) or not isinstance(port, int):
        raise DecodeError(f"Uplink port must be an integer, got {port!r}")

    if raw_payload is None:
        payload = b""
    elif isinstance(raw_payload, str):
        try:
            payload = base64.b64decode(raw_payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecodeError(f"Uplink payload is not valid base64: {exc}") from exc
    else:
        raise DecodeError(
            f"Uplink payload must be a base64 string, got {type(raw_payload).__name__}"
        )

    return UplinkMessage(port=port, payload=payload, metadata=metadata)


def encode_downlink(message: DownlinkMessage) -> bytes:
    document = {
        "port": message.port,
        "confirmed": message.confirmed,
        "payload": base64.b64encode(message.payload).decode("ascii"),
    }
    return json.dumps(document).encode("utf-8")
