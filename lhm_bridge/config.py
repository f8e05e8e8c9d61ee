from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import configparser

from lhm_bridge.sources import DEFAULT_URL

READING_PREFIX = "reading:"
VALUE_KINDS = ("value", "min", "max")


@dataclass(frozen=True)
class MqttConfig:
    host: str
    port: int
    base_topic: str
    discovery_topic: str
    client_id: str
    username: str | None
    password: str | None
    qos: int
    retain: bool
    tls_enabled: bool
    ca_cert: str | None
    keepalive: int = 60


@dataclass(frozen=True)
class PublishConfig:
    interval_s: int = 1
    scope: str = "default"
    default_url: str = DEFAULT_URL


@dataclass(frozen=True)
class ReadingConfig:
    """Filter criteria and source binding for one published reading."""

    name: str
    hardware_type: str = ""
    hardware_name: str = ""
    hardware_index: int = 0
    sensor_type: str = ""
    sensor_name: str = ""
    sensor_index: int = 0
    value_name: str = "Value"
    parent: str | None = None
    url: str | None = None
    scope: str = "default"

    @property
    def value_kind(self) -> str:
        return self.value_name.strip().lower()

    @property
    def declares_source(self) -> bool:
        return self.url is not None

    @classmethod
    def from_section(
        cls, name: str, section: configparser.SectionProxy, default_scope: str = "default"
    ) -> ReadingConfig:
        return cls(
            name=name,
            hardware_type=section.get("HardwareType", "").strip(),
            hardware_name=section.get("HardwareName", "").strip(),
            hardware_index=section.getint("HardwareIndex", 0),
            sensor_type=section.get("SensorType", "").strip(),
            sensor_name=section.get("SensorName", "").strip(),
            sensor_index=section.getint("SensorIndex", 0),
            value_name=section.get("SensorValueName", "Value").strip() or "Value",
            parent=_get_optional(section.get("Parent")),
            url=_get_optional(section.get("URL")),
            scope=_get_optional(section.get("Scope")) or default_scope,
        )


@dataclass(frozen=True)
class AppConfig:
    mqtt: MqttConfig
    publish: PublishConfig
    readings: list[ReadingConfig] = field(default_factory=list)


def _get_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def load_config(path: str | Path) -> AppConfig:
    parser = configparser.ConfigParser(interpolation=None)
    read_files = parser.read(path, encoding="utf-8")
    if not read_files:
        raise FileNotFoundError(f"Config file not found: {path}")

    # Use parser.get with fallback so dry runs work without an [mqtt] section
    mqtt = MqttConfig(
        host=parser.get("mqtt", "host", fallback="localhost"),
        port=parser.getint("mqtt", "port", fallback=1883),
        base_topic=parser.get("mqtt", "base_topic", fallback="lhm-bridge/readings"),
        discovery_topic=parser.get("mqtt", "discovery_topic", fallback="homeassistant"),
        client_id=parser.get("mqtt", "client_id", fallback="lhm-bridge"),
        username=_get_optional(parser.get("mqtt", "username", fallback=None)),
        password=_get_optional(parser.get("mqtt", "password", fallback=None)),
        qos=parser.getint("mqtt", "qos", fallback=0),
        retain=parser.getboolean("mqtt", "retain", fallback=False),
        tls_enabled=parser.getboolean("mqtt", "tls", fallback=False),
        ca_cert=_get_optional(parser.get("mqtt", "ca_cert", fallback=None)),
        keepalive=parser.getint("mqtt", "keepalive", fallback=60),
    )

    publish = PublishConfig(
        interval_s=parser.getint("publish", "interval_s", fallback=1),
        scope=parser.get("publish", "scope", fallback="default"),
        default_url=parser.get("publish", "default_url", fallback=DEFAULT_URL),
    )

    readings = [
        ReadingConfig.from_section(
            section_name[len(READING_PREFIX):].strip(),
            parser[section_name],
            publish.scope,
        )
        for section_name in parser.sections()
        if section_name.lower().startswith(READING_PREFIX)
    ]

    return AppConfig(mqtt=mqtt, publish=publish, readings=readings)
