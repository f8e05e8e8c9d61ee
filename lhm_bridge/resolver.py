from __future__ import annotations

import logging
from typing import Callable, Hashable

from lhm_bridge.config import VALUE_KINDS, ReadingConfig
from lhm_bridge.registry import SourceNotFoundError, SourceRegistry
from lhm_bridge.sensor_index import SensorIndex
from lhm_bridge.sources import DEFAULT_URL, HttpSource, normalize_url

# Returned by update() when no reading is available. Indistinguishable from a
# sensor that genuinely reads -1; use read() where that matters.
NO_VALUE = -1.0


def http_index(url: str) -> SensorIndex:
    return SensorIndex(HttpSource(url))


class Resolver:
    """Binds one reading's filter criteria to a sensor and serves its value.

    State is either unresolved (``sensor_id is None``) or resolved. Only
    :meth:`reload`, or the replacement of a Parent source, returns a resolved
    reading to unresolved; a cache miss for a resolved id is reported but
    does not trigger re-resolution.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        scope: Hashable = "default",
        default_url: str = DEFAULT_URL,
        index_factory: Callable[[str], SensorIndex] = http_index,
    ) -> None:
        self.registry = registry
        self.scope = scope
        self.default_url = default_url
        self.index_factory = index_factory
        self.config: ReadingConfig | None = None
        self.index: SensorIndex | None = None
        self.sensor_id: str | None = None
        self.logger = logging.getLogger(self.__class__.__name__)

    def reload(self, config: ReadingConfig) -> None:
        self.config = config
        self.index = None
        self.sensor_id = None
        self.logger.debug(
            "%s: Hardware(type, name, index): (%s, %s, %s), Sensor(type, name, index): (%s, %s, %s)",
            config.name,
            config.hardware_type,
            config.hardware_name,
            config.hardware_index,
            config.sensor_type,
            config.sensor_name,
            config.sensor_index,
        )
        if config.value_kind not in VALUE_KINDS:
            self.logger.error(
                "%s: sensor has no value named %r (expected one of %s)",
                config.name,
                config.value_name,
                ", ".join(VALUE_KINDS),
            )
            return
        try:
            self.index = self._bind(config)
        except SourceNotFoundError as exc:
            self.logger.error("%s: %s", config.name, exc)
            return
        self.resolve()

    def _bind(self, config: ReadingConfig) -> SensorIndex:
        if config.declares_source:
            existing = self.registry.get(self.scope, config.name)
            if existing is not None and existing.source.base_url == normalize_url(config.url):
                return existing
            return self.registry.register(self.scope, config.name, self.index_factory(config.url))
        if config.parent:
            return self.registry.lookup(self.scope, config.parent)
        return self.registry.default(self.scope, lambda: self.index_factory(self.default_url))

    def resolve(self) -> str | None:
        if self.index is None or self.config is None:
            return None
        config = self.config
        self.sensor_id = None
        hardware = self.index.find_hardware(config.hardware_type, config.hardware_name, config.hardware_index)
        if hardware is None:
            self.logger.warning(
                "%s: can't find hardware -> check hardware filter, "
                "check if LibreHardwareMonitor is running",
                config.name,
            )
            return None
        self.logger.debug("%s: Hardware Identifier: %s", config.name, hardware.identifier)
        sensor = self.index.match_sensor(hardware, config.sensor_type, config.sensor_name, config.sensor_index)
        if sensor is None:
            self.logger.warning("%s: can't find sensor -> check sensor filter", config.name)
            return None
        self.logger.debug("%s: Sensor Identifier: %s", config.name, sensor.identifier)
        self.sensor_id = sensor.identifier
        return self.sensor_id

    def _follow_parent(self) -> None:
        """Re-bind to the parent's current index if it was replaced or removed."""
        current = self.registry.get(self.scope, self.config.parent)
        if current is self.index:
            return
        self.sensor_id = None
        self.index = current
        if current is None:
            self.logger.warning("%s: source %r is no longer registered", self.config.name, self.config.parent)
        else:
            self.logger.info("%s: source %r was replaced, rebinding", self.config.name, self.config.parent)

    def read(self) -> float | None:
        """Return the current value, or None if there is none."""
        if self.index is None or self.config is None:
            return None
        if self.config.parent and not self.config.declares_source:
            self._follow_parent()
            if self.index is None:
                return None
        if self.sensor_id is None and self.resolve() is None:
            return None
        value = self.index.get_value(self.sensor_id, self.config.value_kind)
        if value is None:
            self.logger.warning(
                "%s: no %s cached for sensor %s",
                self.config.name,
                self.config.value_kind,
                self.sensor_id,
            )
        return value

    def update(self) -> float:
        value = self.read()
        return NO_VALUE if value is None else value

    def dispose(self) -> None:
        if self.config is not None and self.config.declares_source:
            self.registry.remove(self.scope, self.config.name)
        self.index = None
        self.sensor_id = None
