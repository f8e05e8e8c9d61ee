"""LibreHardwareMonitor sensor bridge."""

from lhm_bridge.config import AppConfig, ReadingConfig, load_config
from lhm_bridge.hardware_types import map_type
from lhm_bridge.registry import SourceNotFoundError, SourceRegistry
from lhm_bridge.resolver import NO_VALUE, Resolver
from lhm_bridge.scanner import extract_values
from lhm_bridge.sensor_index import SensorIndex
from lhm_bridge.sources import HttpSource, SourceError
from lhm_bridge.tree import Hardware, Sensor, TreeSnapshot, build_tree

__all__ = [
    "AppConfig",
    "Hardware",
    "HttpSource",
    "NO_VALUE",
    "ReadingConfig",
    "Resolver",
    "Sensor",
    "SensorIndex",
    "SourceError",
    "SourceNotFoundError",
    "SourceRegistry",
    "TreeSnapshot",
    "build_tree",
    "extract_values",
    "load_config",
    "map_type",
]
