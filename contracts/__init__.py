"""
Data contracts shipped alongside the templating engine.
"""

from .priority import HasPriority, compare_priority, priority_key
from .dns import DnsManager, DnsRecord, DnsRecordMatch
from .dump_mode import DbDumpMode

__all__ = [
    "HasPriority",
    "compare_priority",
    "priority_key",
    "DnsManager",
    "DnsRecord",
    "DnsRecordMatch",
    "DbDumpMode",
]
