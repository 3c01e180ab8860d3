from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

ROOT_PARENT = "root"


def _int(raw: dict[str, Any], key: str) -> int:
    return int(raw.get(key, 0))


def _str(raw: dict[str, Any], key: str) -> str:
    return str(raw.get(key, ""))


@dataclass
class TcStats:
    bytes: int = 0
    packets: int = 0
    drops: int = 0
    overlimits: int = 0
    requeues: int = 0
    backlog: int = 0
    qlen: int = 0
    lended: int = 0
    borrowed: int = 0
    giants: int = 0
    tokens: int = 0
    ctokens: int = 0

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> TcStats:
        return cls(
            bytes=_int(raw, "bytes"),
            packets=_int(raw, "packets"),
            drops=_int(raw, "drops"),
            overlimits=_int(raw, "overlimits"),
            requeues=_int(raw, "requeues"),
            backlog=_int(raw, "backlog"),
            qlen=_int(raw, "qlen"),
            lended=_int(raw, "lended"),
            borrowed=_int(raw, "borrowed"),
            giants=_int(raw, "giants"),
            tokens=_int(raw, "tokens"),
            ctokens=_int(raw, "ctokens"),
        )


@dataclass
class QdiscOptions:
    r2q: int = 0
    direct_packets_stat: int = 0
    direct_qlen: int = 0

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> QdiscOptions:
        return cls(
            r2q=_int(raw, "r2q"),
            direct_packets_stat=_int(raw, "direct_packets_stat"),
            direct_qlen=_int(raw, "direct_qlen"),
        )


@dataclass
class TcClass:
    """One traffic-control class as printed by ``tc -s -j class show``."""

    kind: str
    handle: str
    root: bool = False
    parent: str = ""
    leaf: str = ""
    device: str = ""
    prio: int = 0
    rate: int = 0
    ceil: int = 0
    burst: int = 0
    cburst: int = 0
    stats: TcStats = field(default_factory=TcStats)

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> TcClass:
        # iproute2 may print some counters beside "stats" rather than inside it.
        stats = {**raw, **raw.get("stats", {})}
        return cls(
            kind=_str(raw, "class"),
            handle=_str(raw, "handle"),
            root=bool(raw.get("root", False)),
            parent=_str(raw, "parent"),
            leaf=_str(raw, "leaf"),
            device=_str(raw, "device"),
            prio=_int(raw, "prio"),
            rate=_int(raw, "rate"),
            ceil=_int(raw, "ceil"),
            burst=_int(raw, "burst"),
            cburst=_int(raw, "cburst"),
            stats=TcStats.from_json(stats),
        )

    @property
    def labels(self) -> tuple[str, str, str, str]:
        return (self.kind, self.handle, self.parent, self.device)


@dataclass
class TcQdisc:
    """One queueing discipline as printed by ``tc -s -j qdisc show``."""

    kind: str
    handle: str
    root: bool = False
    parent: str = ""
    device: str = ""
    options: QdiscOptions = field(default_factory=QdiscOptions)
    stats: TcStats = field(default_factory=TcStats)

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> TcQdisc:
        return cls(
            kind=_str(raw, "kind") if "kind" in raw else _str(raw, "class"),
            handle=_str(raw, "handle"),
            root=bool(raw.get("root", False)),
            parent=_str(raw, "parent"),
            device=_str(raw, "device"),
            options=QdiscOptions.from_json(raw.get("options", {})),
            stats=TcStats.from_json(raw),
        )

    @property
    def labels(self) -> tuple[str, str, str, str]:
        return (self.kind, self.handle, self.parent, self.device)


def attach_device(record: TcClass | TcQdisc, device: str) -> None:
    """Back-fill the source interface and normalise the parent of root records."""
    record.device = device
    if record.root:
        record.parent = ROOT_PARENT
