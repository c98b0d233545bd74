"""
Data models for DNS-Failover.
"""

import ipaddress
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import idna


class Role(Enum):
    """
    Which side of the failover pair an endpoint represents.
    """

    PRIMARY = "primary"
    FAILOVER = "failover"


class HealthStatus(Enum):
    """
    Outcome of a health probe. There is no unknown state.
    """

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class Endpoint:
    """
    A server that the managed record can point at.
    """

    role: Role
    address: str

    @property
    def version(self) -> int:
        """
        IP version of the address (4 or 6).

        Returns:
            int: 4 or 6
        """
        return ipaddress.ip_address(self.address).version


@dataclass(frozen=True)
class ManagedRecord:
    """
    Reference to the single DNS record kept pointed at a healthy server.

    ttl and proxied are re-asserted on every write.
    """

    zone_id: str
    record_id: str
    hostname: str
    record_type: str = "A"
    ttl: int = 120
    proxied: bool = True


@dataclass(frozen=True)
class RunResult:
    """
    Outcome of one reconciliation pass.
    """

    current_ip: str
    desired_ip: str
    status: HealthStatus
    changed: bool = False
    dry_run: bool = False
    primary_ip: Optional[str] = None

    @property
    def published_ip(self) -> str:
        """Address the record holds after the pass."""
        if self.changed and self.dry_run:
            return self.current_ip
        return self.desired_ip

    @property
    def at_primary(self) -> bool:
        return self.published_ip == self.primary_ip

    @property
    def exit_code(self) -> int:
        return 0


def record_type_for(address: str) -> Optional[str]:
    """Return "A" or "AAAA" for an IP literal, None if it is not one."""
    try:
        version = ipaddress.ip_address(address).version
    except ValueError:
        return None
    return "A" if version == 4 else "AAAA"


def normalize_hostname(hostname: str) -> str:
    """
    Return the ASCII (punycode) form of a hostname.

    Raises:
        ValueError: If the hostname is not a valid IDNA name
    """
    hostname = hostname.strip()
    if hostname.isascii():
        return hostname
    try:
        return idna.encode(hostname, uts46=True).decode("ascii")
    except idna.IDNAError as e:
        raise ValueError(f"{hostname!r} is not a valid hostname: {e}") from e
