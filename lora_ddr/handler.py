"""Per-message DDR pipeline bridging MQTT uplinks to DDR downlinks."""

from __future__ import annotations

import logging
from enum import Enum

from .core import (
    BuildError,
    DDRLookup,
    DDRLookupError,
    DecodeError,
    MessageTransport,
    ParseError,
    RouteError,
    build_downlink,
    decode_uplink,
    downlink_topic,
    encode_downlink,
    is_ddr_request,
    parse_coordinates,
)

LOGGER = logging.getLogger(__name__)


class HandleOutcome(str, Enum):
    """Where handling of a single message ended."""

    DECODE_FAILED = "decode_failed"
    NOT_DDR = "not_ddr"
    PARSE_FAILED = "parse_failed"
    LOOKUP_FAILED = "lookup_failed"
    BUILD_FAILED = "build_failed"
    ROUTE_FAILED = "route_failed"
    PUBLISH_FAILED = "publish_failed"
    PUBLISHED = "published"


class DDRMessageHandler:
    """Turns DDR requests seen on the uplink subscription into downlinks.

    Every message is handled in isolation: a failing step is logged and only
    that message is dropped. Nothing is retried and nothing is remembered
    between messages, so concurrent invocations need no locking.
    """

    def __init__(
        self,
        transport: MessageTransport,
        ddr_service: DDRLookup,
        *,
        topic: str,
        qos: int = 0,
    ) -> None:
        self._transport = transport
        self._ddr_service = ddr_service
        self._topic = topic
        self._qos = qos
        self._handler_registered = False

    async def start(self) -> None:
        if self._handler_registered:
            raise RuntimeError("DDRMessageHandler already started")

        self._transport.set_message_handler(self.handle_message)
        try:
            self._transport.subscribe(self._topic, qos=self._qos)
        except Exception:
            self._transport.set_message_handler(None)
            raise
        self._handler_registered = True
        LOGGER.info("DDR handler subscribed to %s", self._topic)

    async def stop(self) -> None:
        if not self._handler_registered:
            return

        try:
            self._transport.unsubscribe(self._topic)
        except Exception as exc:  # pragma: no cover - best-effort cleanup
            LOGGER.debug("Unsubscribe from %s failed: %s", self._topic, exc)
        finally:
            self._transport.set_message_handler(None)
            self._handler_registered = False

    async def handle_message(self, topic: str, payload: bytes) -> HandleOutcome:
        try:
            uplink = decode_uplink(payload)
        except DecodeError as exc:
            LOGGER.warning(
                "Can't decode payload to uplink message (topic=%s, payload=%r): %s",
                topic,
                payload,
                exc,
            )
            return HandleOutcome.DECODE_FAILED

        if not is_ddr_request(uplink.payload):
            LOGGER.debug(
                "Received message other than ddr request (topic=%s, port=%s, payload=%r)",
                topic,
                uplink.port,
                uplink.payload,
            )
            return HandleOutcome.NOT_DDR

        try:
            coordinates = parse_coordinates(uplink.payload)
        except ParseError as exc:
            LOGGER.warning(
                "Can't retrieve coordinates from ddr request (topic=%s, payload=%r): %s",
                topic,
                uplink.payload,
                exc,
            )
            return HandleOutcome.PARSE_FAILED

        try:
            response = await self._ddr_service.lookup(coordinates)
        except DDRLookupError as exc:
            LOGGER.warning(
                "DDR request failed (topic=%s, coordinates=%s): %s",
                topic,
                coordinates,
                exc,
            )
            return HandleOutcome.LOOKUP_FAILED

        try:
            downlink = build_downlink(response)
        except BuildError as exc:
            LOGGER.warning(
                "Could not generate downlink message (topic=%s, response=%s): %s",
                topic,
                response,
                exc,
            )
            return HandleOutcome.BUILD_FAILED

        try:
            target = downlink_topic(topic)
        except RouteError as exc:
            LOGGER.warning("Could not generate downlink topic: %s", exc)
            return HandleOutcome.ROUTE_FAILED

        LOGGER.debug("Set ddr (topic=%s, downlink=%s)", target, downlink)

        try:
            self._transport.publish(target, encode_downlink(downlink), qos=self._qos)
        except RuntimeError as exc:
            LOGGER.warning("Publishing downlink to %s failed: %s", target, exc)
            return HandleOutcome.PUBLISH_FAILED

        LOGGER.info(
            "Sent ddr downlink %r to %s for %s",
            downlink.payload,
            target,
            coordinates,
        )
        return HandleOutcome.PUBLISHED
