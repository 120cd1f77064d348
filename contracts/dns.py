"""
DNS record management contract.

Providers implement ``DnsManager``; records are plain dataclasses so that
rendered template values can be written as record values directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

DEFAULT_TTL = 86400


@dataclass(frozen=True)
class DnsRecord:
    """A single resource record."""
    fqdn: str
    type: str
    value: str
    ttl: int = DEFAULT_TTL

    def __post_init__(self):
        object.__setattr__(self, "fqdn", self.fqdn.lower().rstrip("."))
        object.__setattr__(self, "type", self.type.upper())


@dataclass(frozen=True)
class DnsRecordMatch:
    """Criteria for selecting records; unset fields match anything."""
    type: Optional[str] = None
    fqdn: Optional[str] = None
    subdomain: Optional[str] = None

    def matches(self, record: DnsRecord) -> bool:
        if self.type and record.type != self.type.upper():
            return False
        if self.fqdn and record.fqdn != self.fqdn.lower().rstrip("."):
            return False
        if self.subdomain:
            suffix = self.subdomain.lower().rstrip(".")
            if record.fqdn != suffix and not record.fqdn.endswith("." + suffix):
                return False
        return True


class DnsManager(ABC):
    """Operations a DNS provider exposes."""

    @abstractmethod
    def list(self, match: DnsRecordMatch) -> List[DnsRecord]:
        """Records matching ``match``."""

    @abstractmethod
    def write(self, record: DnsRecord) -> None:
        """Create or replace a record."""

    @abstractmethod
    def publish(self) -> None:
        """Make pending writes visible."""

    @abstractmethod
    def remove(self, match: DnsRecordMatch) -> int:
        """Delete matching records and return how many were removed."""

    @abstractmethod
    def remove_all(self, domain: str) -> None:
        """Delete every record under ``domain``."""
