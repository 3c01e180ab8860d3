from __future__ import annotations

from argparse import Namespace
from dataclasses import dataclass

DEFAULT_PORT = 9096
DEFAULT_TC_PATH = "/usr/sbin/tc"


@dataclass(frozen=True)
class ExporterConfig:
    port: int
    listen_address: str
    tc_path: str
    interfaces: tuple[str, ...]


def _get_interfaces(values: list[str] | None) -> tuple[str, ...]:
    if not values:
        return ()
    return tuple(value.strip() for value in values if value.strip())


def config_from_args(args: Namespace) -> ExporterConfig:
    return ExporterConfig(
        port=args.port,
        listen_address=args.listen_address,
        tc_path=args.tc_path,
        interfaces=_get_interfaces(args.interfaces),
    )
