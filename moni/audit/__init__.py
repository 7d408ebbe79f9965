"""Audit logging package."""

from moni.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
