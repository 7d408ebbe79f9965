"""Derived-state engine: monthly aggregation and reminder scheduling."""

from moni.engine.reminders import (
    CANCEL_REMINDER_DAYS,
    compute_reminders,
    next_billing_date,
)
from moni.engine.summary import (
    BREAKDOWN_LIMIT,
    compute_summary,
    month_key,
    transactions_for_month,
)

__all__ = [
    "BREAKDOWN_LIMIT",
    "CANCEL_REMINDER_DAYS",
    "compute_reminders",
    "compute_summary",
    "month_key",
    "next_billing_date",
    "transactions_for_month",
]
