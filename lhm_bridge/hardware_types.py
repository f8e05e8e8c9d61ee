"""Translate LibreHardwareMonitor icon hints into WMI hardware type names."""
from __future__ import annotations

import posixpath

# Keys are icon file stems as served by the LibreHardwareMonitor web server.
HARDWARE_TYPES: dict[str, str] = {
    "cpu": "Cpu",
    "nvidia": "GpuNvidia",
    "ati": "GpuAmd",
    "amd": "GpuAmd",
    "radeon": "GpuAmd",
    "intel": "GpuIntel",
    "hdd": "Storage",
    "ssd": "Storage",
    "nvme": "Storage",
    "storage": "Storage",
    "ram": "Memory",
    "memory": "Memory",
    "mainboard": "Motherboard",
    "motherboard": "Motherboard",
    "nic": "Network",
    "network": "Network",
    "ethernet": "Network",
    "wireless": "Network",
    "battery": "Battery",
    "psu": "Psu",
    "power": "Psu",
    "powersupply": "Psu",
    "chip": "SuperIO",
    "superio": "SuperIO",
    "ec": "EmbeddedController",
    "embeddedcontroller": "EmbeddedController",
    "controller": "Cooler",
    "cooler": "Cooler",
}


def icon_stem(icon_hint: str) -> str:
    """Return the lower-cased file stem of an icon URL or path."""
    path = icon_hint.strip().replace("\\", "/").split("?", 1)[0]
    stem, _ = posixpath.splitext(posixpath.basename(path))
    return stem.lower()


def map_type(icon_hint: str | None) -> str:
    stem = icon_stem(icon_hint or "")
    return HARDWARE_TYPES.get(stem, stem)
