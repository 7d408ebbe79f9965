"""
Audit Models for Moni

Every mutation and every recovered failure produces an audit event.
This provides:
1. Traceability of all changes to the data set
2. An operator-visible channel for errors that never reach the user
3. Debugging information when a persisted slot turns out corrupt

DESIGN DECISION: Audit events are append-only records. They are written
to the structured log and never stored inside the data set.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every store mutation and every failure path has its own event type.
    """
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_EDITED = "transaction_edited"
    TRANSACTION_DELETED = "transaction_deleted"

    # Subscriptions
    SUBSCRIPTION_ADDED = "subscription_added"
    SUBSCRIPTION_EDITED = "subscription_edited"
    SUBSCRIPTION_TOGGLED = "subscription_toggled"
    SUBSCRIPTION_DELETED = "subscription_deleted"

    # Data set lifecycle
    DATA_LOADED = "data_loaded"
    DATA_CLEARED = "data_cleared"
    CREDENTIAL_UPDATED = "credential_updated"

    # Persistence
    STORAGE_READ_FAILED = "storage_read_failed"
    SAVE_FAILED = "save_failed"

    # Import / export
    IMPORT_SUCCEEDED = "import_succeeded"
    IMPORT_REJECTED = "import_rejected"
    EXPORT_CREATED = "export_created"

    # Advisor
    ANALYSIS_SAVED = "analysis_saved"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """How loudly an event is logged."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    One entry of the audit trail.
    Mutations, load fallbacks and external failures each produce one.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Subject
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'subscription', 'data_set')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Event details
    description: str = Field(
        ...,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Failure detail
    error_message: Optional[str] = None

    # User action tracking
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Flat, JSON-safe keyword arguments for the structlog call.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Factory methods for the events the store and flows emit.

    Usage:
        event = AuditEventBuilder.entity_changed(AuditEventType.TRANSACTION_ADDED, "transaction", tx.id)
        event = AuditEventBuilder.storage_read_failed("moni_data_v1", str(exc))
    """

    @staticmethod
    def entity_changed(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        action = event_type.value.rsplit("_", 1)[-1]
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {action}",
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def data_loaded(
        storage_key: str,
        transaction_count: int,
        subscription_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_LOADED,
            entity_type="data_set",
            description=f"Data set loaded from slot '{storage_key}'",
            details={
                "transactions": transaction_count,
                "subscriptions": subscription_count,
            },
        )

    @staticmethod
    def data_cleared() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="data_set",
            description="All data cleared",
            is_user_action=True,
        )

    @staticmethod
    def credential_updated(has_credential: bool) -> AuditEvent:
        # Never log the credential itself
        return AuditEvent(
            event_type=AuditEventType.CREDENTIAL_UPDATED,
            entity_type="data_set",
            description="Advisor credential updated",
            details={"has_credential": has_credential},
            is_user_action=True,
        )

    @staticmethod
    def storage_read_failed(
        storage_key: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_READ_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="data_set",
            description=f"Persisted slot '{storage_key}' unreadable, starting empty",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(
        storage_key: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="data_set",
            description=f"Could not write slot '{storage_key}'",
            error_message=error_message,
        )

    @staticmethod
    def import_succeeded(
        transaction_count: int,
        subscription_count: int,
        warnings: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_SUCCEEDED,
            entity_type="data_set",
            description=(
                f"Imported {transaction_count} transactions and "
                f"{subscription_count} subscriptions"
            ),
            details={"warnings": warnings},
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(
        error_kind: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="data_set",
            description=f"Import rejected ({error_kind}) with {len(issues)} issues",
            details={
                "error_kind": error_kind,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def export_created(filename: str, size: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_CREATED,
            entity_type="data_set",
            description=f"Backup exported: {filename}",
            details={"filename": filename, "size": size},
            is_user_action=True,
        )

    @staticmethod
    def analysis_saved(length: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYSIS_SAVED,
            entity_type="analysis",
            description="Advisor analysis stored",
            details={"length": length},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
        )
