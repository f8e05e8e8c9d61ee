from __future__ import annotations

import argparse
from datetime import datetime, timezone
import json
import logging
import time
from typing import Any

from lhm_bridge.config import AppConfig, load_config
from lhm_bridge.logging_utils import configure_logging, resolve_log_level
from lhm_bridge.mqtt_client import MqttPublisher
from lhm_bridge.registry import SourceRegistry
from lhm_bridge.resolver import Resolver, http_index
from lhm_bridge.schema import SCHEMA_NAME, SCHEMA_VERSION, validate_payload
from lhm_bridge.sensor_index import SensorIndex
from lhm_bridge.tree import Hardware


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LibreHardwareMonitor sensor bridge")
    parser.add_argument(
        "--config",
        default="config/example.cfg",
        help="Path to CFG configuration file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable debug logging (-v) or trace logging (-vv)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log payloads without publishing to MQTT",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Read and publish a single payload, then exit",
    )
    parser.add_argument(
        "--dump-json",
        help="Write the JSON payload to a file (overwrites on each loop)",
    )
    parser.add_argument(
        "--list-sensors",
        action="store_true",
        help="Print the hardware/sensor tree of the default source and exit",
    )
    return parser


def build_resolvers(config: AppConfig, registry: SourceRegistry) -> dict[str, Resolver]:
    """Create and reload one resolver per configured reading.

    Source-declaring readings are reloaded first so that ``Parent`` references
    find them; the returned mapping keeps the configured order.
    """
    resolvers: dict[str, Resolver] = {}
    for reading in sorted(config.readings, key=lambda r: not r.declares_source):
        resolver = Resolver(registry, reading.scope, config.publish.default_url)
        resolver.reload(reading)
        resolvers[reading.name] = resolver
    return {reading.name: resolvers[reading.name] for reading in config.readings}


def collect(resolvers: dict[str, Resolver], scope: str) -> dict[str, Any]:
    return {
        "schema": {"name": SCHEMA_NAME, "version": SCHEMA_VERSION},
        "ts": datetime.now(timezone.utc).isoformat(),
        "scope": scope,
        "readings": {name: resolver.read() for name, resolver in resolvers.items()},
    }


def render_tree(index: SensorIndex) -> list[str]:
    snapshot = index.snapshot
    if snapshot is None:
        return []
    lines: list[str] = []

    def render(hardware: Hardware, depth: int) -> None:
        indent = "  " * depth
        lines.append(f"{indent}{hardware.hardware_type}: {hardware.name} ({hardware.identifier})")
        for sensor in hardware.sensors:
            value = index.get_value(sensor.identifier)
            shown = "n/a" if value is None else f"{value:g}"
            lines.append(
                f"{indent}  [{sensor.sensor_type}] {sensor.name} = {shown} ({sensor.identifier})"
            )
        for child in hardware.children:
            render(child, depth + 1)

    for hardware in snapshot.hardware:
        render(hardware, 0)
    return lines


def teardown(resolvers: dict[str, Resolver], registry: SourceRegistry, config: AppConfig) -> None:
    for resolver in resolvers.values():
        resolver.dispose()
    scopes = {reading.scope for reading in config.readings} | {config.publish.scope}
    for scope in scopes:
        registry.dispose_scope(scope)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    level = resolve_log_level(args.verbose, args.log_level)
    configure_logging(level)
    logger = logging.getLogger("lhm_bridge")
    config = load_config(args.config)
    pretty_print = level <= logging.DEBUG
    registry = SourceRegistry()

    if args.list_sensors:
        index = registry.default(
            config.publish.scope, lambda: http_index(config.publish.default_url)
        )
        if not index.refresh_tree():
            logger.error("Could not read sensors from %s", config.publish.default_url)
        for line in render_tree(index):
            print(line)
        registry.dispose_scope(config.publish.scope)
        return

    if not config.readings:
        logger.warning("No [reading:...] sections configured.")

    resolvers = build_resolvers(config, registry)
    publisher = None if args.dry_run else MqttPublisher(config.mqtt)
    if publisher is not None:
        publisher.connect()
        publisher.publish_discovery(resolvers)

    interval = max(1, config.publish.interval_s)
    logger.info("LHM bridge started with %d readings. Publishing every %s seconds.", len(resolvers), interval)

    try:
        while True:
            payload = collect(resolvers, config.publish.scope)
            schema_errors = validate_payload(payload)
            if schema_errors:
                logger.warning(
                    "Schema validation failed with %s errors.", len(schema_errors)
                )
                logger.debug("Schema errors: %s", schema_errors)
            payload_json = json.dumps(payload, indent=2) if pretty_print else json.dumps(payload)
            if args.dump_json:
                with open(args.dump_json, "w", encoding="utf-8") as handle:
                    handle.write(payload_json)
            if args.dry_run:
                logger.info("Payload: %s", payload_json)
            elif publisher is not None:
                publisher.publish(payload_json)
            if args.once:
                logger.info("Single-run mode enabled; exiting after initial payload.")
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("LHM bridge stopped.")
    finally:
        teardown(resolvers, registry, config)
        if publisher is not None:
            publisher.disconnect()


if __name__ == "__main__":
    main()
