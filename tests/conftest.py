"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import copy
import json
from unittest.mock import Mock, patch

import pytest

from tc_exporter.collector import TcCollector
from tc_exporter.config import ExporterConfig
from tc_exporter.metrics import TcMetrics


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: test served over a real HTTP socket"
    )


HTB_CLASS = {
    "class": "htb",
    "handle": "1:10",
    "root": False,
    "parent": "1:1",
    "prio": 2,
    "rate": 1000000,
    "ceil": 2000000,
    "burst": 1600,
    "cburst": 1600,
    "stats": {
        "bytes": 500,
        "packets": 10,
        "drops": 0,
        "overlimits": 3,
        "requeues": 0,
        "lended": 7,
        "borrowed": 1,
        "giants": 0,
        "tokens": 200000,
        "ctokens": -1500,
    },
}

HTB_ROOT_CLASS = {
    "class": "htb",
    "handle": "1:1",
    "root": True,
    "parent": "",
    "prio": 0,
    "rate": 2000000,
    "ceil": 2000000,
    "stats": {"bytes": 9000, "packets": 60},
}

HTB_QDISC = {
    "kind": "htb",
    "handle": "1:",
    "root": True,
    "options": {"r2q": 10, "default": "0x10", "direct_packets_stat": 4, "direct_qlen": 1000},
    "bytes": 12345,
    "packets": 99,
    "drops": 2,
    "overlimits": 5,
    "requeues": 1,
    "backlog": 0,
    "qlen": 0,
}


class FakeTc:
    """Stand-in for ``subprocess.run`` answering ``tc`` queries from a table.

    ``outputs`` maps ``(kind, iface)`` to either a JSON-serialisable value,
    raw ``str``/``bytes`` output, or a ``(returncode, stderr)`` tuple for
    failures. ``on_call`` runs with the command before each answer.
    """

    def __init__(self, outputs=None):
        self.outputs = dict(outputs or {})
        self.calls = []
        self.on_call = None

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        if self.on_call is not None:
            self.on_call(cmd)
        kind, iface = cmd[4], cmd[-1]
        answer = self.outputs.get((kind, iface), [])
        if isinstance(answer, tuple):
            returncode, stderr = answer
            return Mock(returncode=returncode, stdout=b"", stderr=stderr.encode())
        if not isinstance(answer, (str, bytes)):
            answer = json.dumps(answer)
        if isinstance(answer, str):
            answer = answer.encode()
        return Mock(returncode=0, stdout=answer, stderr=b"")

    def queried_interfaces(self):
        return [cmd[-1] for cmd in self.calls]


@pytest.fixture
def exporter_config():
    """Create an exporter config for testing."""
    return ExporterConfig(
        port=9096,
        listen_address="",
        tc_path="/usr/sbin/tc",
        interfaces=("eth0",),
    )


@pytest.fixture
def host_interfaces():
    """Pretend only lo and eth0 exist on the host."""
    with patch("psutil.net_if_addrs", return_value={"lo": [], "eth0": []}) as mocked:
        yield mocked


@pytest.fixture
def fake_tc():
    fake = FakeTc()
    with patch("subprocess.run", side_effect=fake):
        yield fake


@pytest.fixture
def collector(exporter_config):
    return TcCollector(exporter_config)


@pytest.fixture
def metrics(collector):
    return TcMetrics(collector)


@pytest.fixture
def htb_class():
    return copy.deepcopy(HTB_CLASS)


@pytest.fixture
def htb_root_class():
    return copy.deepcopy(HTB_ROOT_CLASS)


@pytest.fixture
def htb_qdisc():
    return copy.deepcopy(HTB_QDISC)
