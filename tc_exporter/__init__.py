"""Prometheus exporter for Linux traffic-control classes and qdiscs."""

from tc_exporter.collector import (
    CollectionError,
    CommandError,
    DecodeError,
    TcCollector,
)
from tc_exporter.config import ExporterConfig, config_from_args
from tc_exporter.interfaces import valid_interfaces
from tc_exporter.metrics import TcMetrics
from tc_exporter.models import TcClass, TcQdisc

__all__ = [
    "CollectionError",
    "CommandError",
    "DecodeError",
    "ExporterConfig",
    "TcClass",
    "TcCollector",
    "TcMetrics",
    "TcQdisc",
    "config_from_args",
    "valid_interfaces",
]
