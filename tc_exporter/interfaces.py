from __future__ import annotations

import logging
from collections.abc import Iterable

import psutil

logger = logging.getLogger(__name__)


def host_interfaces() -> set[str]:
    """Names of the network interfaces currently present on the host."""
    return set(psutil.net_if_addrs())


def valid_interfaces(names: Iterable[str]) -> list[str]:
    """Keep the configured names that resolve to a live interface.

    Order and duplicates are preserved. Missing interfaces are not an error,
    they are skipped until they show up on a later scrape.
    """
    present = host_interfaces()
    valid: list[str] = []
    for name in names:
        if name in present:
            valid.append(name)
        else:
            logger.debug("Interface %s not present, skipping.", name)
    return valid
