"""Append-only audit history ledger."""

from ats.services.audit.ledger import AuditLedger, HistoryAction

__all__ = ["AuditLedger", "HistoryAction"]
