from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Iterable
from typing import Any

from tc_exporter.config import ExporterConfig
from tc_exporter.interfaces import valid_interfaces
from tc_exporter.logging_utils import TRACE_LEVEL
from tc_exporter.models import TcClass, TcQdisc, attach_device
from tc_exporter.schema import validate_records

CLASS = "class"
QDISC = "qdisc"


class CollectionError(Exception):
    """Raised when a scrape cannot produce a complete set of records."""


class CommandError(CollectionError):
    """Raised when ``tc`` cannot be started or exits non-zero."""


class DecodeError(CollectionError):
    """Raised when ``tc`` output is not the expected JSON shape."""


class TcCollector:
    def __init__(self, config: ExporterConfig) -> None:
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    def collect_classes(self, interfaces: Iterable[str] | None = None) -> list[TcClass]:
        return self._collect(CLASS, interfaces)

    def collect_qdiscs(self, interfaces: Iterable[str] | None = None) -> list[TcQdisc]:
        return self._collect(QDISC, interfaces)

    def _collect(self, kind: str, interfaces: Iterable[str] | None) -> list[Any]:
        if interfaces is None:
            interfaces = self.config.interfaces
        records: list[Any] = []
        for iface in valid_interfaces(interfaces):
            records.extend(self.query(iface, kind))
        self.logger.debug("Collected %d %s records.", len(records), kind)
        return records

    def query(self, iface: str, kind: str) -> list[TcClass] | list[TcQdisc]:
        """Run ``tc`` for one interface and decode the records it prints."""
        command = [self.config.tc_path, "-name", "-s", "-j", kind, "show", "dev", iface]
        output = self._run_command(command)
        records = self._decode(kind, iface, output)
        for record in records:
            attach_device(record, iface)
        return records

    def _decode(self, kind: str, iface: str, output: bytes) -> list[TcClass] | list[TcQdisc]:
        try:
            data = json.loads(output.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeError(f"json error: {kind} output for {iface}: {exc}") from exc
        errors = validate_records(kind, data)
        if errors:
            self.logger.debug("Schema errors for %s %s: %s", kind, iface, errors)
            raise DecodeError(
                f"json error: unexpected {kind} output for {iface}: {errors[0]}"
            )
        if kind == CLASS:
            return [TcClass.from_json(item) for item in data]
        return [TcQdisc.from_json(item) for item in data]

    def _run_command(self, command: list[str]) -> bytes:
        display = " ".join(command)
        try:
            result = subprocess.run(
                command,
                check=False,
                capture_output=True,
            )
        except OSError as exc:
            raise CommandError(f"command error: {display}: {exc}") from exc
        if result.returncode != 0:
            stderr = (result.stderr or b"").decode("utf-8", errors="replace").strip()
            self.logger.debug("Command failed (%s): %s", result.returncode, display)
            message = f"command error: {display}: exit status {result.returncode}"
            if stderr:
                message = f"{message}: {stderr}"
            raise CommandError(message)
        self.logger.log(
            TRACE_LEVEL, "stdout: %s", result.stdout.decode("utf-8", errors="replace").strip()
        )
        return result.stdout
