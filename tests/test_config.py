"""Tests for configuration loading."""
from __future__ import annotations

import pytest

from lhm_bridge.config import ReadingConfig, load_config

CONFIG_CONTENT = """[mqtt]
host = broker.local
port = 1884
username =
retain = true

[publish]
interval_s = 5
scope = desktop

[reading:CPU Load]
HardwareType = Cpu
SensorType = Load
SensorName = CPU Total

[reading:Rig]
url = http://rig:8085
hardwareindex = 1
SensorIndex = 2
SensorValueName = MAX
Scope = other

[reading:Rig GPU]
Parent = Rig

[unrelated]
key = value
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "bridge.cfg"
    path.write_text(CONFIG_CONTENT, encoding="utf-8")
    return path


class TestLoadConfig:
    """Test reading CFG files into dataclasses."""

    def test_missing_file(self, tmp_path):
        """Test that a missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.cfg")

    def test_mqtt_and_publish(self, config_file):
        """Test MQTT and publish sections with defaults."""
        config = load_config(config_file)
        assert config.mqtt.host == "broker.local"
        assert config.mqtt.port == 1884
        assert config.mqtt.username is None
        assert config.mqtt.retain is True
        assert config.mqtt.client_id == "lhm-bridge"
        assert config.mqtt.keepalive == 60
        assert config.publish.interval_s == 5
        assert config.publish.scope == "desktop"
        assert config.publish.default_url == "http://127.0.0.1:8085/"

    def test_readings(self, config_file):
        """Test that reading sections keep order and parse filter keys."""
        config = load_config(config_file)
        assert [reading.name for reading in config.readings] == ["CPU Load", "Rig", "Rig GPU"]
        cpu = config.readings[0]
        assert cpu == ReadingConfig(
            name="CPU Load",
            hardware_type="Cpu",
            sensor_type="Load",
            sensor_name="CPU Total",
            scope="desktop",
        )
        assert cpu.value_kind == "value"
        assert not cpu.declares_source

    def test_source_declaring_reading(self, config_file):
        """Test that keys are case-insensitive and URL marks a source."""
        rig = load_config(config_file).readings[1]
        assert rig.url == "http://rig:8085"
        assert rig.declares_source
        assert rig.hardware_index == 1
        assert rig.sensor_index == 2
        assert rig.value_kind == "max"
        assert rig.scope == "other"

    def test_parent_reading(self, config_file):
        """Test that Parent is read and URL stays unset."""
        child = load_config(config_file).readings[2]
        assert child.parent == "Rig"
        assert child.url is None

    def test_sections_optional(self, tmp_path):
        """Test that a config with only readings uses defaults."""
        path = tmp_path / "minimal.cfg"
        path.write_text("[reading:A]\n", encoding="utf-8")
        config = load_config(path)
        assert config.mqtt.host == "localhost"
        assert config.publish.interval_s == 1
        assert config.readings == [ReadingConfig(name="A")]
