"""Main application entry-point for lora-ddr."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from typing import Optional

from .adapters import DDRServiceClient, MQTTClient, MQTTConnectionError
from .config import BridgeConfig, load_config
from .handler import DDRMessageHandler
from .logging import configure_logging

LOGGER = logging.getLogger(__name__)

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class StartupError(RuntimeError):
    """Raised when the MQTT connection or subscription cannot be established."""


class LoraDDRApp:
    """Coordinates application startup and shutdown.

    The MQTT client and DDR service client can be injected for testing;
    by default both are built from the configuration.
    """

    def __init__(
        self,
        config: Optional[BridgeConfig] = None,
        *,
        mqtt_client: Optional[MQTTClient] = None,
        ddr_client: Optional[DDRServiceClient] = None,
    ) -> None:
        self._config = config or load_config()
        self._mqtt_client = mqtt_client or MQTTClient(self._config.mqtt)
        self._ddr_client = ddr_client or DDRServiceClient(self._config.ddr)
        self._handler = DDRMessageHandler(
            self._mqtt_client,
            self._ddr_client,
            topic=self._config.mqtt.topic,
            qos=self._config.mqtt.qos,
        )
        self._shutdown_event: Optional[asyncio.Event] = None

    async def run(self) -> None:
        """Serve DDR requests until a shutdown signal arrives."""

        loop = asyncio.get_running_loop()
        self._shutdown_event = asyncio.Event()

        LOGGER.info("lora-ddr starting with config: %s", self._config.path)

        for sig in _SHUTDOWN_SIGNALS:
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(sig, self.request_shutdown, sig)

        try:
            await self._start_services()
            await self._shutdown_event.wait()
        finally:
            for sig in _SHUTDOWN_SIGNALS:
                with contextlib.suppress(NotImplementedError, RuntimeError):
                    loop.remove_signal_handler(sig)
            await self._stop_services()

    def request_shutdown(self, sig: Optional[signal.Signals] = None) -> None:
        if sig is not None:
            LOGGER.warning("Exiting on signal %s", signal.Signals(sig).name)
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    @classmethod
    def start(cls, config: Optional[BridgeConfig] = None) -> None:
        instance = cls(config=config)
        configure_logging(
            instance._config.logging.level,
            log_path=instance._config.logging.path,
            log_network=instance._config.mqtt.debug,
        )
        try:
            asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("lora-ddr received shutdown signal")

    async def _start_services(self) -> None:
        try:
            await self._mqtt_client.connect()
        except MQTTConnectionError as exc:
            raise StartupError(f"cannot connect to mqtt: {exc}") from exc

        try:
            await self._handler.start()
        except MQTTConnectionError as exc:
            raise StartupError(f"cannot subscribe to topic: {exc}") from exc

        LOGGER.info("lora-ddr active; awaiting ddr requests")

    async def _stop_services(self) -> None:
        await self._handler.stop()
        await self._mqtt_client.disconnect()
        await self._ddr_client.aclose()
