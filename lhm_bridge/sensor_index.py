from __future__ import annotations

import json
import logging
import threading
import time
from typing import Callable

from lhm_bridge.scanner import extract_values
from lhm_bridge.sources import Source, SourceError
from lhm_bridge.tree import Hardware, Sensor, TreeSnapshot, build_tree

MIN_REFRESH_INTERVAL_S = 0.8


def _matches(wanted: str, actual: str) -> bool:
    return not wanted or wanted.casefold() == actual.casefold()


def _pick(items: list, index: int):
    if 0 <= index < len(items):
        return items[index]
    return None


class SensorIndex:
    """Hardware tree and value cache for one sensor source.

    The tree is only rebuilt on demand (first lookup or an explicit
    :meth:`refresh_tree`), while the value cache is re-scanned from the raw
    document at most once per ``min_interval`` seconds so that many readings
    sharing a source cost one fetch per tick.
    """

    def __init__(
        self,
        source: Source,
        clock: Callable[[], float] = time.monotonic,
        min_interval: float = MIN_REFRESH_INTERVAL_S,
    ) -> None:
        self.source = source
        self.clock = clock
        self.min_interval = min_interval
        self.logger = logging.getLogger(self.__class__.__name__)
        self._lock = threading.Lock()
        self._snapshot: TreeSnapshot | None = None
        self._values: dict[str, dict[str, float]] = {}
        self._last_refresh: float | None = None

    @property
    def populated(self) -> bool:
        return self._snapshot is not None

    @property
    def snapshot(self) -> TreeSnapshot | None:
        return self._snapshot

    def _fetch(self) -> str | None:
        self._last_refresh = self.clock()
        try:
            return self.source.fetch()
        except SourceError as exc:
            self.logger.error("%s", exc)
            return None

    def refresh_tree(self) -> bool:
        """Rebuild the tree and value cache from a fresh document.

        Returns False and keeps the previous state if the fetch or parse fails.
        """
        with self._lock:
            document = self._fetch()
            if document is None:
                return False
            try:
                root = json.loads(document)
            except json.JSONDecodeError as exc:
                self.logger.error("Failed to parse sensor document from %s: %s", self.source, exc)
                return False
            except RecursionError:
                self.logger.error("Sensor document from %s is nested too deeply", self.source)
                return False
            snapshot = build_tree(root)
            values = extract_values(document)
            self._snapshot = snapshot
            self._values = values
        self.logger.debug(
            "Rebuilt sensor tree from %s: %d hardware, %d sensors.",
            self.source,
            len(snapshot.flat),
            len(values),
        )
        return True

    def refresh_values(self) -> bool:
        """Re-scan sensor values unless the last refresh was too recent."""
        with self._lock:
            now = self.clock()
            if self._last_refresh is not None and now - self._last_refresh < self.min_interval:
                return False
            document = self._fetch()
            if document is None:
                return False
            self._values = extract_values(document)
        return True

    def find_hardware(self, hardware_type: str = "", hardware_name: str = "", index: int = 0) -> Hardware | None:
        if self._snapshot is None:
            self.refresh_tree()
        with self._lock:
            if self._snapshot is None:
                return None
            candidates = [
                hardware
                for hardware in self._snapshot.flat
                if _matches(hardware_type, hardware.hardware_type)
                and _matches(hardware_name, hardware.name)
            ]
        return _pick(candidates, index)

    def match_sensor(
        self,
        hardware: Hardware,
        sensor_type: str = "",
        sensor_name: str = "",
        index: int = 0,
    ) -> Sensor | None:
        """Select a sensor of ``hardware``; sub-hardware sensors are not searched."""
        candidates = [
            sensor
            for sensor in hardware.sensors
            if _matches(sensor_type, sensor.sensor_type) and _matches(sensor_name, sensor.name)
        ]
        return _pick(candidates, index)

    def find_sensor(
        self,
        hardware_type: str = "",
        hardware_name: str = "",
        hardware_index: int = 0,
        sensor_type: str = "",
        sensor_name: str = "",
        sensor_index: int = 0,
    ) -> Sensor | None:
        hardware = self.find_hardware(hardware_type, hardware_name, hardware_index)
        if hardware is None:
            return None
        self.logger.debug("Hardware Identifier: %s", hardware.identifier)
        return self.match_sensor(hardware, sensor_type, sensor_name, sensor_index)

    def find_sensor_id(
        self,
        hardware_type: str = "",
        hardware_name: str = "",
        hardware_index: int = 0,
        sensor_type: str = "",
        sensor_name: str = "",
        sensor_index: int = 0,
    ) -> str | None:
        sensor = self.find_sensor(
            hardware_type,
            hardware_name,
            hardware_index,
            sensor_type,
            sensor_name,
            sensor_index,
        )
        return sensor.identifier if sensor is not None else None

    def get_value(self, identifier: str, value_kind: str = "value") -> float | None:
        self.refresh_values()
        with self._lock:
            readings = self._values.get(identifier)
        if readings is None:
            return None
        return readings.get(value_kind.lower())

    def dispose(self) -> None:
        with self._lock:
            self._snapshot = None
            self._values = {}
            self._last_refresh = None

    def __repr__(self) -> str:
        return f"SensorIndex({self.source!r})"
