"""
Reminder Scheduler

Computes which active subscriptions are close enough to their next
billing date to warrant an alert.

DESIGN DECISION: Billing days past the end of a month are clamped to
the month's last day (billing day 31 bills on Feb 28/29, Apr 30...).
Dates are never allowed to spill into the following month.
"""

import calendar
from datetime import date, datetime
from typing import Iterable, Union

from moni.models.finance import Alert, ReminderType, Subscription


CANCEL_REMINDER_DAYS = 7


def _clamped(year: int, month: int, billing_day: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(billing_day, last_day))


def next_billing_date(billing_day: int, today: date) -> date:
    """
    Next occurrence of `billing_day` on or after `today`.

    Uses the current month unless that date is already past,
    in which case the same day next month.
    """
    candidate = _clamped(today.year, today.month, billing_day)
    if candidate < today:
        if today.month == 12:
            candidate = _clamped(today.year + 1, 1, billing_day)
        else:
            candidate = _clamped(today.year, today.month + 1, billing_day)
    return candidate


def compute_reminders(
    subscriptions: Iterable[Subscription],
    today: Union[date, datetime],
) -> list[Alert]:
    """
    Build the sorted list of due or nearly due subscription alerts.

    Only active subscriptions with a payment or cancel reminder take
    part. Payment alerts use the subscription's own window (default 3
    days); cancel alerts always use a 7 day window.

    Args:
        subscriptions: Subscriptions to consider (usually all of them)
        today: Reference day; the time of day is ignored

    Returns:
        Alerts ordered soonest first, stable for equal distances
    """
    if isinstance(today, datetime):
        today = today.date()

    alerts = []
    for sub in subscriptions:
        if not sub.active or sub.reminder_type == ReminderType.NONE:
            continue

        due = next_billing_date(sub.billing_day, today)
        days_until = (due - today).days

        if sub.reminder_type == ReminderType.PAYMENT:
            threshold = sub.reminder_threshold
        else:
            threshold = CANCEL_REMINDER_DAYS

        if days_until <= threshold:
            alerts.append(Alert(
                subscription=sub,
                days_until=days_until,
                kind=sub.reminder_type,
                due_date=due,
            ))

    alerts.sort(key=lambda alert: alert.days_until)
    return alerts
