"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import json

import pytest

from lhm_bridge.sources import SourceError, normalize_url


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )


# Trimmed data.json as served by the LibreHardwareMonitor web server.
LHM_DOCUMENT = {
    "id": 0,
    "Text": "Sensor",
    "Min": "Min",
    "Value": "Value",
    "Max": "Max",
    "ImageURL": "",
    "Children": [
        {
            "id": 1,
            "Text": "DESKTOP-TEST",
            "ImageURL": "images_icon/computer.png",
            "Children": [
                {
                    "id": 2,
                    "Text": "ASRock B550",
                    "HardwareId": "/motherboard",
                    "ImageURL": "images_icon/mainboard.png",
                    "Children": [
                        {
                            "id": 3,
                            "Text": "Nuvoton NCT6796D",
                            "HardwareId": "/lpc/nct6796d/0",
                            "ImageURL": "images_icon/chip.png",
                            "Children": [
                                {
                                    "id": 4,
                                    "Text": "Fans",
                                    "ImageURL": "images_icon/fan.png",
                                    "Children": [
                                        {
                                            "id": 5,
                                            "Text": "CPU Fan",
                                            "Min": "1,150 RPM",
                                            "Value": "1,204 RPM",
                                            "Max": "1,310 RPM",
                                            "SensorId": "/lpc/nct6796d/0/fan/1",
                                            "Type": "Fan",
                                            "ImageURL": "images/transparent.png",
                                            "Children": [],
                                        }
                                    ],
                                }
                            ],
                        }
                    ],
                },
                {
                    "id": 6,
                    "Text": "AMD Ryzen 9 5900X",
                    "HardwareId": "/amdcpu/0",
                    "ImageURL": "images_icon/cpu.png",
                    "Children": [
                        {
                            "id": 7,
                            "Text": "Load",
                            "ImageURL": "images_icon/load.png",
                            "Children": [
                                {
                                    "id": 8,
                                    "Text": "CPU Total",
                                    "Min": "1.2 %",
                                    "Value": "12.5 %",
                                    "Max": "98.0 %",
                                    "SensorId": "/amdcpu/0/load/0",
                                    "Type": "Load",
                                    "ImageURL": "images/transparent.png",
                                    "Children": [],
                                },
                                {
                                    "id": 9,
                                    "Text": "CPU Core #1",
                                    "Min": "0.0 %",
                                    "Value": "20.0 %",
                                    "Max": "100.0 %",
                                    "SensorId": "/amdcpu/0/load/1",
                                    "Type": "Load",
                                    "ImageURL": "images/transparent.png",
                                    "Children": [],
                                },
                            ],
                        },
                        {
                            "id": 10,
                            "Text": "Temperatures",
                            "ImageURL": "images_icon/temperature.png",
                            "Children": [
                                {
                                    "id": 11,
                                    "Text": "Core (Tctl/Tdie)",
                                    "Min": "38.1 °C",
                                    "Value": "45.3 °C",
                                    "Max": "81.0 °C",
                                    "SensorId": "/amdcpu/0/temperature/2",
                                    "Type": "Temperature",
                                    "ImageURL": "images/transparent.png",
                                    "Children": [],
                                }
                            ],
                        },
                    ],
                },
                {
                    "id": 12,
                    "Text": "NVIDIA GeForce RTX 3080",
                    "HardwareId": "/gpu-nvidia/0",
                    "ImageURL": "images_icon/nvidia.png",
                    "Children": [
                        {
                            "id": 13,
                            "Text": "Temperatures",
                            "ImageURL": "images_icon/temperature.png",
                            "Children": [
                                {
                                    "id": 14,
                                    "Text": "GPU Core",
                                    "Min": "35.0 °C",
                                    "Value": "65.0 °C",
                                    "Max": "72.0 °C",
                                    "SensorId": "/gpu-nvidia/0/temperature/0",
                                    "Type": "Temperature",
                                    "ImageURL": "images/transparent.png",
                                    "Children": [],
                                }
                            ],
                        }
                    ],
                },
            ],
        }
    ],
}


class FakeSource:
    """In-memory sensor source that counts fetches."""

    def __init__(
        self, document: str | dict | None = None, base_url: str = "http://127.0.0.1:8085/"
    ) -> None:
        if document is None:
            document = LHM_DOCUMENT
        self.document = document if isinstance(document, str) else json.dumps(document)
        self.base_url = normalize_url(base_url)
        self.fetches = 0
        self.fail = False

    def fetch(self) -> str:
        self.fetches += 1
        if self.fail:
            raise SourceError("connection refused")
        return self.document


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def lhm_json():
    return json.dumps(LHM_DOCUMENT)


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def clock():
    return FakeClock()
