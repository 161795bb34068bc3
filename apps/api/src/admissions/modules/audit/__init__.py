"""
Audit Log Module

Append-only record of who performed which administrative mutation.
"""

from .models import AuditAction, AuditLog
from .service import record_admin_action

__all__ = ["AuditAction", "AuditLog", "record_admin_action"]
