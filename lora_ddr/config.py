"""Configuration loader for lora-ddr."""

from __future__ import annotations

from configparser import ConfigParser, Error as ConfigParserError
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from . import constants

_DEFAULT_PORTS = {"tcp": 1883, "ssl": 8883, "ws": 80, "wss": 443}

CONFIG_TEMPLATE = """\
# MQTT configuration
[mqtt]

# MQTT server address
#
# The format should be scheme://host:port
# Where "scheme" is one of "tcp", "ssl", "ws" or "wss",
# "host" is the ip-address (or hostname) and
# "port" is the port on which the broker is accepting connections.
#
# Example:
# server = tcp://foobar.com:1883
server = {mqtt[server]}

# Username
username = {mqtt[username]}

# Password
password = {mqtt[password]}

# Client ID
client_id = {mqtt[client_id]}

# Quality of Service
qos = {mqtt[qos]}

# Uplink topic subscription
topic = {mqtt[topic]}

# Debug enable
debug = {mqtt[debug]}

# DDR API
[ddr]

# DDR API url
url = {ddr[url]}

# Request timeout in seconds (0 disables the timeout)
timeout_seconds = {ddr[timeout_seconds]}

[logging]
level = {logging[level]}
path = {logging[path]}
"""


class ConfigError(ValueError):
    """Raised when the configuration file holds an unusable value."""


@dataclass(slots=True)
class MQTTConfig:
    server: str = constants.DEFAULT_MQTT_SERVER
    broker_host: str = "localhost"
    broker_port: int = 1883
    transport: str = "tcp"
    use_tls: bool = False
    username: Optional[str] = constants.DEFAULT_MQTT_USERNAME
    password: Optional[str] = constants.DEFAULT_MQTT_PASSWORD
    client_id: str = constants.DEFAULT_MQTT_CLIENT_ID
    qos: int = constants.DEFAULT_MQTT_QOS
    topic: str = constants.DEFAULT_MQTT_TOPIC
    debug: bool = False


@dataclass(slots=True)
class DDRConfig:
    url: str = constants.DEFAULT_DDR_URL
    timeout_seconds: float = 0.0


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None


@dataclass(slots=True)
class BridgeConfig:
    mqtt: MQTTConfig
    ddr: DDRConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def parse_server(server: str) -> tuple[str, int, str, bool]:
    """Split an MQTT server address into host, port, transport and TLS flag."""

    value = server.strip()
    if "://" not in value:
        value = f"tcp://{value}"

    parts = urlsplit(value)
    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise ConfigError(f"Unsupported MQTT server scheme: {parts.scheme!r}")

    try:
        port = parts.port
    except ValueError as exc:
        raise ConfigError(f"Invalid MQTT server port in {server!r}") from exc

    host = parts.hostname
    if not host:
        raise ConfigError(f"MQTT server address has no host: {server!r}")

    transport = "websockets" if scheme in ("ws", "wss") else "tcp"
    use_tls = scheme in ("ssl", "wss")
    return host, port or _DEFAULT_PORTS[scheme], transport, use_tls


def _typed(getter: Callable[..., Any], section: str, option: str, fallback: Any) -> Any:
    try:
        return getter(section, option, fallback=fallback)
    except ValueError as exc:
        raise ConfigError(f"Invalid value for [{section}] {option}: {exc}") from exc


def load_config(path: Optional[Path] = None) -> BridgeConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser(interpolation=None)
    parser.read_dict(
        {
            "mqtt": {
                "server": constants.DEFAULT_MQTT_SERVER,
                "username": constants.DEFAULT_MQTT_USERNAME,
                "password": constants.DEFAULT_MQTT_PASSWORD,
                "client_id": constants.DEFAULT_MQTT_CLIENT_ID,
                "qos": str(constants.DEFAULT_MQTT_QOS),
                "topic": constants.DEFAULT_MQTT_TOPIC,
                "debug": "false",
            },
            "ddr": {
                "url": constants.DEFAULT_DDR_URL,
                "timeout_seconds": "0",
            },
            "logging": {
                "level": "INFO",
                "path": "",
            },
        }
    )

    if config_path.exists():
        try:
            parser.read(config_path)
        except ConfigParserError as exc:
            raise ConfigError(f"Cannot parse {config_path}: {exc}") from exc

    server = parser.get("mqtt", "server")
    host, port, transport, use_tls = parse_server(server)

    mqtt = MQTTConfig(
        server=server,
        broker_host=host,
        broker_port=port,
        transport=transport,
        use_tls=use_tls,
        username=parser.get("mqtt", "username", fallback=None) or None,
        password=parser.get("mqtt", "password", fallback=None) or None,
        client_id=parser.get("mqtt", "client_id"),
        qos=max(0, min(2, _typed(parser.getint, "mqtt", "qos", 0))),
        topic=parser.get("mqtt", "topic"),
        debug=_typed(parser.getboolean, "mqtt", "debug", False),
    )

    ddr = DDRConfig(
        url=parser.get("ddr", "url"),
        timeout_seconds=max(
            0.0, _typed(parser.getfloat, "ddr", "timeout_seconds", 0.0)
        ),
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
    )

    return BridgeConfig(
        mqtt=mqtt,
        ddr=ddr,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def render_config(config: BridgeConfig) -> str:
    """Render the commented configuration file with the current values."""

    sections = {
        name: dict(config.raw[name]) for name in ("mqtt", "ddr", "logging")
    }
    return CONFIG_TEMPLATE.format(**sections)
