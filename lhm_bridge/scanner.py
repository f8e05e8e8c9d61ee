"""Fast extraction of sensor readings from raw LibreHardwareMonitor JSON.

The full document is only parsed structurally when the hardware topology is
rebuilt. Value refreshes happen on every tick, so they scan the raw text for
sensor objects instead. Sensor objects in ``data.json`` are flat (their
``Children`` array is always empty), which means the closing brace following
a ``"SensorId"`` key ends the object.
"""
from __future__ import annotations

import json
import re

SENSOR_ID_KEY = '"SensorId"'
VALUE_KEYS = {
    "value": '"Value"',
    "min": '"Min"',
    "max": '"Max"',
}

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_WHITESPACE = " \t\r\n"


def parse_reading(raw: object) -> float | None:
    """Parse a reading such as ``"45.3 °C"``, ``"1,200 RPM"`` or ``12.5``.

    Only the leading numeric token is significant. Commas are thousands
    separators; the decimal separator is always ``.``.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if not isinstance(raw, str):
        return None
    parts = raw.split(None, 1)
    if not parts:
        return None
    token = parts[0].replace(",", "")
    if not _NUMBER_RE.fullmatch(token):
        return None
    return float(token)


def _skip_whitespace(text: str, index: int) -> int:
    while index < len(text) and text[index] in _WHITESPACE:
        index += 1
    return index


def _read_string(text: str, index: int) -> str | None:
    """Decode the JSON string literal starting at ``text[index]``."""
    if index >= len(text) or text[index] != '"':
        return None
    end = index + 1
    while end < len(text):
        char = text[end]
        if char == "\\":
            end += 2
            continue
        if char == '"':
            try:
                return json.loads(text[index : end + 1])
            except json.JSONDecodeError:
                return None
        end += 1
    return None


def _value_start(text: str, key_end: int) -> int | None:
    """Return the index of the value following ``key_end``, or None if no colon."""
    index = _skip_whitespace(text, key_end)
    if index >= len(text) or text[index] != ":":
        return None
    return _skip_whitespace(text, index + 1)


def _read_field(span: str, key: str) -> str | None:
    search_from = 0
    while True:
        found = span.find(key, search_from)
        if found < 0:
            return None
        search_from = found + len(key)
        start = _value_start(span, search_from)
        if start is None:
            # Matched inside a string value rather than as a key.
            continue
        if start < len(span) and span[start] == '"':
            return _read_string(span, start)
        end = start
        while end < len(span) and span[end] not in ",}]" + _WHITESPACE:
            end += 1
        return span[start:end]


def extract_values(document: str) -> dict[str, dict[str, float]]:
    """Map each sensor id in ``document`` to its value/min/max readings.

    Unparseable readings are left out of the sensor's mapping. Objects that
    are not flat, or whose id is not a string, are skipped. A later
    occurrence of the same id replaces the earlier one.
    """
    values: dict[str, dict[str, float]] = {}
    position = 0
    while True:
        marker = document.find(SENSOR_ID_KEY, position)
        if marker < 0:
            break
        start = document.rfind("{", 0, marker)
        end = document.find("}", marker)
        if end < 0:
            break
        nested = document.find("{", marker, end)
        if nested >= 0:
            # Not a flat sensor object; resume at the nested object.
            position = nested
            continue
        position = end + 1
        if start < 0 or document.rfind("}", start, marker) >= 0:
            continue
        span = document[start : end + 1]
        id_start = _value_start(span, marker - start + len(SENSOR_ID_KEY))
        if id_start is None:
            continue
        sensor_id = _read_string(span, id_start)
        if not sensor_id:
            continue
        readings: dict[str, float] = {}
        for kind, key in VALUE_KEYS.items():
            number = parse_reading(_read_field(span, key))
            if number is not None:
                readings[kind] = number
        values[sensor_id] = readings
    return values
