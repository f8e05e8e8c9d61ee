from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from lhm_bridge.hardware_types import map_type


@dataclass(frozen=True)
class Sensor:
    name: str
    sensor_type: str
    identifier: str


@dataclass
class Hardware:
    name: str
    hardware_type: str
    identifier: str = ""
    sensors: list[Sensor] = field(default_factory=list)
    children: list[Hardware] = field(default_factory=list)

    def walk(self) -> Iterator[Hardware]:
        """Yield this node and its sub-hardware in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass
class TreeSnapshot:
    """Top-level hardware plus every hardware node in depth-first order."""

    hardware: list[Hardware] = field(default_factory=list)
    flat: list[Hardware] = field(default_factory=list)

    def sensor_ids(self) -> set[str]:
        return {sensor.identifier for node in self.flat for sensor in node.sensors}


def _text(node: dict[str, Any], key: str) -> str:
    value = node.get(key)
    if value is None:
        return ""
    return str(value).replace("\x00", "").strip()


def build_tree(root: Any) -> TreeSnapshot:
    """Rebuild the hardware/sensor hierarchy from a parsed ``data.json``.

    Nodes with a ``SensorId`` become sensors of the enclosing hardware, nodes
    with a ``HardwareId`` become hardware, and everything else (the document
    root, sensor category groups) is passed through transparently. The walk
    uses an explicit stack, so nesting depth is not bounded by the
    interpreter's recursion limit.
    """
    snapshot = TreeSnapshot()
    stack: list[tuple[Any, Hardware | None]] = [(root, None)]
    while stack:
        node, parent = stack.pop()
        if not isinstance(node, dict):
            continue
        enclosing = parent
        sensor_id = _text(node, "SensorId")
        hardware_id = _text(node, "HardwareId")
        if sensor_id:
            if parent is not None:
                parent.sensors.append(
                    Sensor(
                        name=_text(node, "Text"),
                        sensor_type=_text(node, "Type"),
                        identifier=sensor_id,
                    )
                )
        elif hardware_id:
            hardware = Hardware(
                name=_text(node, "Text"),
                hardware_type=map_type(_text(node, "ImageURL")),
                identifier=hardware_id,
            )
            snapshot.flat.append(hardware)
            if parent is not None:
                parent.children.append(hardware)
            else:
                snapshot.hardware.append(hardware)
            enclosing = hardware
        children = node.get("Children")
        if isinstance(children, list):
            # Reversed so the first child is popped first (pre-order).
            stack.extend((child, enclosing) for child in reversed(children))
    return snapshot
