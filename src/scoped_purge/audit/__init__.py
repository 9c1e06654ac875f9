"""
Purge audit trail.
"""

__all__ = ["PurgeAuditEvent", "PurgeAuditLogger"]

from scoped_purge.audit.logger import PurgeAuditLogger
from scoped_purge.audit.models import PurgeAuditEvent
