"""Protocol definitions for the collaborators the DDR pipeline calls into."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Protocol

from .models import Coordinates, DDRResponse

MessageHandler = Callable[[str, bytes], Awaitable[None] | None]


class MessageTransport(Protocol):
    """Narrow publish/subscribe surface of the MQTT connection.

    Connection lifecycle (connect, disconnect) stays with the owner of the
    client; the pipeline only ever subscribes and publishes.
    """

    def subscribe(self, topic: str, qos: int = 0) -> None: ...

    def unsubscribe(self, topic: str) -> None: ...

    def publish(
        self, topic: str, payload: bytes, qos: int = 0, retain: bool = False
    ) -> None: ...

    def set_message_handler(self, handler: Optional[MessageHandler]) -> None: ...


class DDRLookup(Protocol):
    """Coordinate to datarate resolver."""

    async def lookup(self, coordinates: Coordinates) -> DDRResponse:
        """Resolve the datarate the device should use at ``coordinates``.

        Raises:
            DDRLookupError: If the service cannot be reached or its answer
                cannot be decoded.
        """
        ...
