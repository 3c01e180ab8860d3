from __future__ import annotations

import argparse
import logging
import sys

from tc_exporter.collector import TcCollector
from tc_exporter.config import DEFAULT_PORT, DEFAULT_TC_PATH, config_from_args
from tc_exporter.logging_utils import configure_logging, resolve_log_level
from tc_exporter.metrics import TcMetrics
from tc_exporter.server import create_server


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from None
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Prometheus exporter for tc class and qdisc statistics"
    )
    parser.add_argument(
        "-p",
        "--port",
        type=_port,
        default=DEFAULT_PORT,
        help=f"Port to listen on (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "--listen-address",
        default="",
        help="Address to bind (default: all addresses)",
    )
    parser.add_argument(
        "--tc-path",
        default=DEFAULT_TC_PATH,
        help=f"Path to the tc binary (default: {DEFAULT_TC_PATH})",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (TRACE, DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable debug logging (-v) or trace logging (-vv)",
    )
    parser.add_argument(
        "interfaces",
        nargs="+",
        metavar="INTERFACE",
        help="Network interfaces to monitor",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = config_from_args(args)
    if not config.interfaces:
        parser.error("at least one interface is required")

    configure_logging(resolve_log_level(args.verbose, args.log_level))
    logger = logging.getLogger("tc_exporter")

    metrics = TcMetrics(TcCollector(config))
    try:
        server = create_server(config.listen_address, config.port, metrics)
    except OSError as exc:
        logger.error(
            "Cannot listen on %s:%s: %s", config.listen_address or "*", config.port, exc
        )
        return 1

    logger.info(
        "Listening on %s:%s for interfaces %s",
        config.listen_address or "*",
        config.port,
        ", ".join(config.interfaces),
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("tc exporter stopped.")
    finally:
        server.server_close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
