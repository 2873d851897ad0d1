from __future__ import annotations

import ipaddress
import socket

import psutil

DEFAULT_PROBE_PORT = "8081"


class NoLocalAddressError(RuntimeError):
    pass


def _candidates() -> list[str]:
    """IPv4 addresses of every interface, in interface order."""
    return [
        addr.address
        for addrs in psutil.net_if_addrs().values()
        for addr in addrs
        if addr.family == socket.AF_INET
    ]


def get_local_ip() -> str:
    """First non-loopback IPv4 address of this host."""
    for addr in _candidates():
        try:
            ip = ipaddress.ip_address(addr)
        except ValueError:
            continue
        if ip.version == 4 and not ip.is_loopback and not ip.is_unspecified:
            return str(ip)
    raise NoLocalAddressError("can't find Interface IP")


def replace_ip(addr: str, new_ip: str, default_port: str = DEFAULT_PROBE_PORT) -> str:
    """Swap the host of ``host:port`` for ``new_ip``; fall back to ``default_port``."""
    parts = addr.split(":")
    if len(parts) == 2:
        return f"{new_ip}:{parts[1]}"
    return f"{new_ip}:{default_port}"


def split_host_port(addr: str) -> tuple[str, int]:
    host, _, port = addr.rpartition(":")
    return host, int(port)
