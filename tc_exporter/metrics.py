"""Prometheus gauges for tc classes and qdiscs.

Metrics are split into two registries served from separate endpoints:

- ``params``: configuration-like values that rarely change (``/params``)
- ``stats``: counters that move on every scrape (``/metrics``)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from tc_exporter.collector import TcCollector
from tc_exporter.models import TcClass, TcQdisc

PARAMS = "params"
STATS = "stats"

LABELS = ["kind", "handle", "parent", "device"]

# (metric name, help text, value getter)
CLASS_PARAMS: list[tuple[str, str, Callable[[TcClass], int]]] = [
    ("tc_class_prio", "class priority of leaf; lower are served first", lambda c: c.prio),
    ("tc_class_rate", "rate allocated to this class (htb class can still borrow)", lambda c: c.rate),
    (
        "tc_class_ceil",
        "rate at which the class can send if its parent has bandwidth to spare (htb)",
        lambda c: c.ceil,
    ),
    ("tc_class_burst", "bytes that can be burst at ceil speed {computed}", lambda c: c.burst),
    ("tc_class_cburst", "bytes that can be burst at 'infinite' speed {computed}", lambda c: c.cburst),
]

QDISC_PARAMS: list[tuple[str, str, Callable[[TcQdisc], int]]] = [
    (
        "tc_qdisc_options_r2q",
        "Divisor used to calculate quantum values for classes. Classes divide rate by this number.",
        lambda q: q.options.r2q,
    ),
    ("tc_qdisc_options_direct_packets_stat", "direct_packets_stat option", lambda q: q.options.direct_packets_stat),
    ("tc_qdisc_options_direct_qlen", "direct_qlen option", lambda q: q.options.direct_qlen),
]

CLASS_STATS: list[tuple[str, str, Callable[[TcClass], int]]] = [
    ("tc_class_stats_bytes", "number of seen bytes", lambda c: c.stats.bytes),
    ("tc_class_stats_packets", "number of seen packets", lambda c: c.stats.packets),
    ("tc_class_stats_drops", "number of dropped packets", lambda c: c.stats.drops),
    ("tc_class_stats_overlimits", "number of enqueues over the limit", lambda c: c.stats.overlimits),
    ("tc_class_stats_requeues", "number of requeues", lambda c: c.stats.requeues),
    ("tc_class_stats_lended", "lended tokens (htb)", lambda c: c.stats.lended),
    ("tc_class_stats_borrowed", "borrowed tokens (htb)", lambda c: c.stats.borrowed),
    ("tc_class_stats_backlog", "backlog size", lambda c: c.stats.backlog),
    ("tc_class_stats_qlen", "qlen size", lambda c: c.stats.qlen),
    ("tc_class_stats_giants", "number of packets larger than the mtu (htb)", lambda c: c.stats.giants),
    ("tc_class_stats_tokens", "tokens left at rate (htb)", lambda c: c.stats.tokens),
    ("tc_class_stats_ctokens", "tokens left at ceil (htb)", lambda c: c.stats.ctokens),
]

QDISC_STATS: list[tuple[str, str, Callable[[TcQdisc], int]]] = [
    ("tc_qdisc_bytes", "number of seen bytes", lambda q: q.stats.bytes),
    ("tc_qdisc_packets", "number of seen packets", lambda q: q.stats.packets),
    ("tc_qdisc_drops", "number of dropped packets", lambda q: q.stats.drops),
    ("tc_qdisc_overlimits", "number of enqueues over the limit", lambda q: q.stats.overlimits),
    ("tc_qdisc_requeues", "number of requeues", lambda q: q.stats.requeues),
    ("tc_qdisc_backlog", "backlog size", lambda q: q.stats.backlog),
    ("tc_qdisc_qlen", "qlen size", lambda q: q.stats.qlen),
]


class MetricGroup:
    """A registry of gauges fed from class and qdisc records."""

    def __init__(
        self,
        name: str,
        class_specs: list[tuple[str, str, Callable[[TcClass], int]]],
        qdisc_specs: list[tuple[str, str, Callable[[TcQdisc], int]]],
    ) -> None:
        self.name = name
        self.registry = CollectorRegistry()
        self.class_gauges = [
            (Gauge(metric, doc, LABELS, registry=self.registry), getter)
            for metric, doc, getter in class_specs
        ]
        self.qdisc_gauges = [
            (Gauge(metric, doc, LABELS, registry=self.registry), getter)
            for metric, doc, getter in qdisc_specs
        ]

    @property
    def gauges(self) -> list[Gauge]:
        return [gauge for gauge, _ in self.class_gauges + self.qdisc_gauges]

    def reset(self) -> None:
        for gauge in self.gauges:
            gauge.clear()

    def populate(self, classes: list[TcClass], qdiscs: list[TcQdisc]) -> None:
        self._set_all(self.class_gauges, classes)
        self._set_all(self.qdisc_gauges, qdiscs)

    @staticmethod
    def _set_all(gauges: list[tuple[Gauge, Callable[[Any], int]]], records: list[Any]) -> None:
        for record in records:
            labels = record.labels
            for gauge, getter in gauges:
                gauge.labels(*labels).set(getter(record))

    def render(self) -> bytes:
        return generate_latest(self.registry)


class TcMetrics:
    def __init__(self, collector: TcCollector) -> None:
        self.collector = collector
        self.groups = {
            PARAMS: MetricGroup(PARAMS, CLASS_PARAMS, QDISC_PARAMS),
            STATS: MetricGroup(STATS, CLASS_STATS, QDISC_STATS),
        }
        self._lock = threading.Lock()
        self.logger = logging.getLogger(self.__class__.__name__)

    def scrape(self, group_name: str) -> bytes:
        """Rebuild one group from fresh tc output and return its exposition text.

        The group is cleared first. If collection fails the error propagates
        and the group stays empty.
        """
        group = self.groups[group_name]
        with self._lock:
            group.reset()
            classes = self.collector.collect_classes()
            qdiscs = self.collector.collect_qdiscs()
            group.populate(classes, qdiscs)
            self.logger.debug(
                "Populated %s from %d classes and %d qdiscs.",
                group_name,
                len(classes),
                len(qdiscs),
            )
            return group.render()
