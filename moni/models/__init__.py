"""
Data Models Package

This package contains all Pydantic models used in Moni.
All data flowing through the system must conform to these schemas.
"""

from moni.models.finance import (
    DEFAULT_REMINDER_DAYS,
    Alert,
    CategoryLabel,
    CategoryTotal,
    DataSet,
    ImportErrorKind,
    ImportResult,
    MonthlySummary,
    ReminderType,
    StoredAnalysis,
    Subscription,
    SubscriptionPatch,
    Transaction,
    TransactionPatch,
    TransactionType,
    ValidationIssue,
    new_id,
)
from moni.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from moni.models.categories import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    is_known_category,
)

__all__ = [
    # Finance models
    "DEFAULT_REMINDER_DAYS",
    "Alert",
    "CategoryLabel",
    "CategoryTotal",
    "DataSet",
    "ImportErrorKind",
    "ImportResult",
    "MonthlySummary",
    "ReminderType",
    "StoredAnalysis",
    "Subscription",
    "SubscriptionPatch",
    "Transaction",
    "TransactionPatch",
    "TransactionType",
    "ValidationIssue",
    "new_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Catalogue
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "is_known_category",
]
