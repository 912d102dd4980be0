"""Tests for the MQTT adapter."""

import asyncio
import logging
from types import SimpleNamespace

import pytest
import pytest_asyncio

from lora_ddr.adapters import MQTTClient, MQTTConnectionError
from lora_ddr.config import MQTTConfig

import paho.mqtt.client as mqtt


class FakeMqttClient:
    """Minimal fake paho-mqtt client for testing."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        events: dict,
        callback_api_version=None,
        *,
        rc_connect: int = 0,
        rc_disconnect: int = 0,
        publish_rc: int = mqtt.MQTT_ERR_SUCCESS,
        subscribe_rc: int = mqtt.MQTT_ERR_SUCCESS,
        **kwargs,
    ):
        self._loop = loop
        self._events = events
        self._rc_connect = rc_connect
        self._rc_disconnect = rc_disconnect
        self._publish_rc = publish_rc
        self._subscribe_rc = subscribe_rc

        self._events["init"] = (callback_api_version, kwargs)

        self.on_connect = None
        self.on_disconnect = None
        self.on_message = None

    # paho interface -------------------------------------------------
    def enable_logger(self, logger):
        self._events["logger"] = logger

    def username_pw_set(self, username, password=None):
        self._events["auth"] = (username, password)

    def tls_set(self):
        self._events["tls"] = True

    def connect_async(self, host, port, keepalive):
        self._events["connect_args"] = (host, port, keepalive)
        if self.on_connect:
            self._loop.call_soon(
                self.on_connect, self, None, None, self._rc_connect, None
            )

    def loop_start(self):
        self._events["loop_start"] = self._events.get("loop_start", 0) + 1

    def loop_stop(self):
        self._events["loop_stop"] = self._events.get("loop_stop", 0) + 1

    def disconnect(self):
        self._events["disconnect_called"] = True
        if self.on_disconnect:
            self._loop.call_soon(
                self.on_disconnect, self, None, None, self._rc_disconnect, None
            )

    def publish(self, topic, payload, qos=0, retain=False):
        self._events.setdefault("published", []).append((topic, payload, qos, retain))
        return SimpleNamespace(rc=self._publish_rc)

    def subscribe(self, topic, qos=0):
        self._events.setdefault("subscribed", []).append((topic, qos))
        return self._subscribe_rc, 1

    def unsubscribe(self, topic):
        self._events.setdefault("unsubscribed", []).append(topic)
        return mqtt.MQTT_ERR_SUCCESS, 2


def _install_fake(monkeypatch, events: dict, **options) -> None:
    loop = asyncio.get_running_loop()

    def factory(*args, **kwargs):
        return FakeMqttClient(loop, events, *args, **options, **kwargs)

    monkeypatch.setattr("lora_ddr.adapters.mqtt.mqtt.Client", factory)


@pytest_asyncio.fixture
async def mqtt_client(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events)

    config = MQTTConfig(
        broker_host="broker.example.com",
        broker_port=1883,
        username="admin",
        password="secret",
        client_id="lora-ddr-test",
    )

    client = MQTTClient(config)
    await client.connect()

    yield client, events

    await client.disconnect()


@pytest.mark.asyncio
async def test_connect_configures_client(mqtt_client):
    client, events = mqtt_client

    version, kwargs = events["init"]
    assert version == mqtt.CallbackAPIVersion.VERSION2
    assert kwargs == {"client_id": "lora-ddr-test", "transport": "tcp"}
    assert events["connect_args"] == ("broker.example.com", 1883, 60)
    assert events["auth"] == ("admin", "secret")
    assert events["logger"].name == "paho.mqtt.client"
    assert events["loop_start"] == 1
    assert "tls" not in events
    assert client.is_connected() is True


@pytest.mark.asyncio
async def test_connect_enables_tls_for_ssl_servers(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events)

    config = MQTTConfig(
        broker_host="broker.example.com",
        broker_port=8883,
        use_tls=True,
        username=None,
        password=None,
    )
    client = MQTTClient(config)
    await client.connect()
    await client.disconnect()

    assert events["tls"] is True
    assert "auth" not in events


@pytest.mark.asyncio
async def test_publish_delegates_to_client(mqtt_client):
    client, events = mqtt_client

    client.publish("app/devices/dev1/down", b"payload", qos=1, retain=True)

    assert events["published"] == [("app/devices/dev1/down", b"payload", 1, True)]


@pytest.mark.asyncio
async def test_subscribe_and_unsubscribe_track_topics(mqtt_client):
    client, events = mqtt_client

    client.subscribe("app/devices/+/up", qos=2)
    assert events["subscribed"] == [("app/devices/+/up", 2)]
    assert client.subscriptions == ["app/devices/+/up"]

    client.unsubscribe("app/devices/+/up")
    assert events["unsubscribed"] == ["app/devices/+/up"]
    assert client.subscriptions == []


@pytest.mark.asyncio
async def test_subscribe_failure_raises(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events, subscribe_rc=mqtt.MQTT_ERR_NO_CONN)

    client = MQTTClient(MQTTConfig())
    await client.connect()

    with pytest.raises(MQTTConnectionError):
        client.subscribe("app/devices/+/up")

    await client.disconnect()


@pytest.mark.asyncio
async def test_message_handler_dispatches_async(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events)

    client = MQTTClient(MQTTConfig())

    message_event = asyncio.Event()

    async def handler(topic: str, payload: bytes) -> None:
        events["handled"] = (topic, payload)
        message_event.set()

    client.set_message_handler(handler)
    await client.connect()

    message = SimpleNamespace(topic="app/devices/dev1/up", payload=b"data")
    client._on_message(client._client, None, message)  # type: ignore[arg-type]

    await asyncio.wait_for(message_event.wait(), timeout=1.0)
    await client.disconnect()

    assert events["handled"] == ("app/devices/dev1/up", b"data")


@pytest.mark.asyncio
async def test_message_handler_failure_is_logged(monkeypatch, caplog):
    events: dict = {}
    _install_fake(monkeypatch, events)

    client = MQTTClient(MQTTConfig())

    async def handler(topic: str, payload: bytes) -> None:
        raise RuntimeError("handler crashed")

    client.set_message_handler(handler)
    await client.connect()

    with caplog.at_level(logging.ERROR, logger="lora_ddr.adapters.mqtt"):
        message = SimpleNamespace(topic="app/devices/dev1/up", payload=b"[[[")
        client._on_message(client._client, None, message)  # type: ignore[arg-type]

        for _ in range(50):
            if "MQTT message handler failed" in caplog.text:
                break
            await asyncio.sleep(0.01)

    await client.disconnect()

    assert "MQTT message handler failed" in caplog.text
    assert "handler crashed" in caplog.text


@pytest.mark.asyncio
async def test_publish_failure_raises(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events, publish_rc=mqtt.MQTT_ERR_NO_CONN)

    client = MQTTClient(MQTTConfig())
    await client.connect()

    with pytest.raises(MQTTConnectionError):
        client.publish("test", b"payload")

    await client.disconnect()


@pytest.mark.asyncio
async def test_publish_without_connection_raises():
    client = MQTTClient(MQTTConfig())

    with pytest.raises(RuntimeError):
        client.publish("test", b"payload")


@pytest.mark.asyncio
async def test_disconnect_stops_network_loop(mqtt_client):
    client, events = mqtt_client

    await client.disconnect()

    assert events["disconnect_called"] is True
    assert events["loop_stop"] == 1
    assert client.is_connected() is False


@pytest.mark.asyncio
async def test_connect_failure_raises(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events, rc_connect=5)

    client = MQTTClient(MQTTConfig())

    with pytest.raises(MQTTConnectionError):
        await client.connect()

    assert events["loop_stop"] == 1
