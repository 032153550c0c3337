"""Entry point for padbridge

Reads game controllers through pygame and publishes a JSON snapshot of their
state on an MQTT or zenoh topic at a fixed interval.
"""
import argparse
import asyncio
import json
import logging
import signal
import sys

from core.aggregator import StateAggregator
from core.config import BridgeConfig, load_config
from core.errors import BridgeError, ConfigError
from core.publisher import SnapshotPublisher
from core.wire import snapshot_schema
from devices.pygame_source import PygameDeviceSource
from mapper import ControllerMapping
from transport.log import LogTransport
from transport.mqtt import MqttTransport
from transport.zenoh import ZenohTransport

LOG = logging.getLogger("padbridge")

MODULE_LOGGERS = {
    "aggregator": "padbridge.aggregator",
    "publisher": "padbridge.publisher",
    "pygame": "padbridge.pygame",
    "mqtt": "padbridge.mqtt",
    "zenoh": "padbridge.zenoh",
    "mapper": "padbridge.mapper",
    "config": "padbridge.config",
    "transport": "padbridge.transport",
}


def build_parser():
    parser = argparse.ArgumentParser(description="padbridge: game controllers → MQTT or zenoh snapshots")
    parser.add_argument("-t", "--topic", help="topic to publish onto (default: remote-control/gamepad)")
    parser.add_argument("--transport", choices=["mqtt", "zenoh"], help="publish transport (default: mqtt)")
    parser.add_argument("-e", "--connect", action="append", default=[], metavar="ENDPOINT",
                        help="endpoint to connect to, e.g. tcp/localhost:1883 (repeatable)")
    parser.add_argument("-l", "--listen", action="append", default=[], metavar="ENDPOINT",
                        help="zenoh endpoint to listen on, e.g. tcp/0.0.0.0:7447 (repeatable)")
    parser.add_argument("--zenoh-config", help="zenoh JSON5 configuration file")
    parser.add_argument("-c", "--config", help="YAML configuration file")
    parser.add_argument("-s", "--sleep-ms", type=int, help="loop sleep time in milliseconds (default: 50)")
    parser.add_argument("--profile", help="YAML button/axis mapping profile")
    parser.add_argument("--dry-run", action="store_true", help="log snapshots instead of publishing them")
    parser.add_argument("--print-schema", action="store_true", help="print the message JSON schema and exit")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level (default: INFO)")
    parser.add_argument("--log-format", default="%(asctime)s %(levelname)s:%(name)s:%(message)s",
                        help="Logging format string")
    parser.add_argument("--debug-modules", nargs="*", default=[],
                        help="Modules to set to DEBUG level (e.g. 'aggregator', 'publisher', 'pygame', 'mqtt', 'zenoh')")
    return parser


def setup_logging(level: str, fmt: str, debug_modules=()):
    logging.basicConfig(level=getattr(logging, level), format=fmt)
    for module in debug_modules:
        logger_name = MODULE_LOGGERS.get(module, f"padbridge.{module}")
        logging.getLogger(logger_name).setLevel(logging.DEBUG)


def resolve_config(args) -> BridgeConfig:
    config = load_config(args.config)
    mapping = ControllerMapping.load_profile(args.profile) if args.profile else None
    config = config.with_overrides(
        topic=args.topic,
        sleep_ms=args.sleep_ms,
        transport=args.transport,
        connect=args.connect,
        listen=args.listen,
        zenoh_config=args.zenoh_config,
        mapping=mapping,
        dry_run=args.dry_run or None,
    )
    return config.validate()


def make_transport(config: BridgeConfig):
    if config.dry_run:
        return LogTransport(config.topic)
    if config.transport == "zenoh":
        return ZenohTransport(config.topic, config.connect, config.listen, config.zenoh_config)
    try:
        return MqttTransport(
            config.topic,
            config.connect,
            username=config.username,
            password=config.password,
            client_id=config.client_id,
            keepalive=config.keepalive,
            qos=config.qos,
            retain=config.retain,
        )
    except ValueError as e:
        raise ConfigError(f"bad broker endpoint: {e}") from e


async def run_bridge(config: BridgeConfig, source, transport):
    task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
        handles_sigterm = True
    except (NotImplementedError, RuntimeError):
        LOG.debug("SIGTERM handler not supported on this platform")
        handles_sigterm = False

    try:
        async with transport:
            LOG.info("Message schema:\n%s", json.dumps(snapshot_schema()))
            LOG.info("Starting controller reader")
            source.open()
            publisher = SnapshotPublisher(source, StateAggregator(), transport, config.sleep_ms)
            await publisher.run()
    finally:
        if handles_sigterm:
            loop.remove_signal_handler(signal.SIGTERM)


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_format, args.debug_modules)

    if args.print_schema:
        print(json.dumps(snapshot_schema(), indent=2))
        return 0

    source = None
    try:
        config = resolve_config(args)
        LOG.info("Using config %s", args.config)
        LOG.info("Using %s transport", config.transport)
        if config.transport == "zenoh":
            LOG.info("Connecting to %s", config.connect)
            LOG.info("Listening on %s", config.listen)
        else:
            LOG.info("Connecting to %s", config.connect or ["localhost:1883"])
        LOG.info("Publishing on %s", config.topic)
        transport = make_transport(config)
        source = PygameDeviceSource(config.mapping)
        asyncio.run(run_bridge(config, source, transport))
    except (KeyboardInterrupt, asyncio.CancelledError):
        LOG.info("shutdown requested")
    except BridgeError as e:
        LOG.error("%s", e)
        return 1
    finally:
        if source is not None:
            source.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
