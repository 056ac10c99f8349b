from __future__ import annotations

import ipaddress
import socket
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Tuple

from loguru import logger

DEFAULT_PROBE_TIMEOUT = 3.0


def resolve_address(host: str, port: int) -> Tuple[str, int]:
    """Turn a host entry into a connectable (ip, port) pair.

    Accepts a literal socket address ("10.0.0.1:8080", "[::1]:8080") or a bare
    IP combined with port. Host names are not resolved; they raise ValueError
    like any other unparsable entry."""
    text = host.strip()
    if text.startswith("["):
        addr, sep, port_text = text[1:].partition("]:")
        if sep:
            return str(ipaddress.IPv6Address(addr)), _parse_port(port_text)
    elif text.count(":") == 1:
        addr, _, port_text = text.partition(":")
        return str(ipaddress.IPv4Address(addr)), _parse_port(port_text)
    return str(ipaddress.ip_address(text)), port


def _parse_port(text: str) -> int:
    port = int(text)
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range: {port}")
    return port


def measure_tcp_connect(host: str, port: int, timeout: float = DEFAULT_PROBE_TIMEOUT) -> int:
    """Return the TCP connect time to host in microseconds.

    Raises ValueError for an unparsable host and OSError when the connection
    is refused or times out."""
    address = resolve_address(host, port)
    start = time.perf_counter()
    with socket.create_connection(address, timeout=timeout):
        elapsed = time.perf_counter() - start
    return int(elapsed * 1_000_000)


def _probe_one(host: str, port: int, timeout: float) -> int:
    try:
        return measure_tcp_connect(host, port, timeout)
    except (OSError, ValueError) as exc:
        penalty = int(timeout * 1_000_000)
        logger.warning(f"Ping {host} (port {port}) failed: {exc}; recording {penalty} us")
        return penalty


def probe_hosts(
    hosts: Iterable[str],
    port: int,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
    max_workers: int = 8,
) -> Dict[str, int]:
    """Probe every host concurrently and return host -> connect time in microseconds.

    Every requested host gets an entry; a failed host is charged the full
    timeout instead of being dropped."""
    host_list: List[str] = list(hosts)
    if not host_list:
        return {}
    workers = max(1, min(max_workers, len(host_list)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="crawlstats-probe") as executor:
        delays = list(executor.map(lambda h: _probe_one(h, port, timeout), host_list))
    return dict(zip(host_list, delays))


def to_millis(delays_us: Dict[str, int]) -> Dict[str, float]:
    return {host: us / 1000.0 for host, us in delays_us.items()}
