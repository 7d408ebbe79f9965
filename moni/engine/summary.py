"""
Monthly Aggregation

DESIGN DECISION: Aggregation is a pure function of (data set, reference
month). It keeps no state between calls and is cheap enough to run on
every render, so callers simply recompute whenever the store changes.

Rules worth remembering:
- Transactions are filtered by a string prefix test on their ISO date.
- Every active subscription counts every month, whatever its billing day.
- The breakdown keeps the top groups only; the rest are dropped, not
  folded into an "other" slice.
"""

import re
from datetime import date
from decimal import Decimal

from moni.models.finance import (
    CategoryTotal,
    DataSet,
    MonthlySummary,
)


BREAKDOWN_LIMIT = 8

_MONTH_KEY = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def month_key(day: date) -> str:
    """YYYY-MM key for the month containing `day`."""
    return f"{day.year:04d}-{day.month:02d}"


def _check_month(reference_month: str) -> None:
    if not _MONTH_KEY.match(reference_month):
        raise ValueError(f"Reference month must be YYYY-MM, got {reference_month!r}")


def compute_summary(data: DataSet, reference_month: str) -> MonthlySummary:
    """
    Compute income, expenses, balance and category breakdown for a month.

    Args:
        data: The full data set
        reference_month: YYYY-MM key of the month to summarize

    Returns:
        MonthlySummary with exact (unrounded) Decimal amounts

    Raises:
        ValueError: If reference_month is not a YYYY-MM key
    """
    _check_month(reference_month)

    monthly = [t for t in data.transactions if t.in_month(reference_month)]
    expenses = [t for t in monthly if t.is_expense()]
    active = data.active_subscriptions

    income = sum((t.amount for t in monthly if t.is_income()), Decimal(0))
    expense_from_transactions = sum((t.amount for t in expenses), Decimal(0))
    subscriptions_total = sum((s.amount for s in active), Decimal(0))
    total_expense = expense_from_transactions + subscriptions_total

    # dicts keep first-seen order, sorted() is stable
    by_group: dict[str, Decimal] = {}
    for item in [*expenses, *active]:
        group = item.category.group
        by_group[group] = by_group.get(group, Decimal(0)) + item.amount

    ranked = sorted(by_group.items(), key=lambda pair: pair[1], reverse=True)

    return MonthlySummary(
        reference_month=reference_month,
        income=income,
        expense_from_transactions=expense_from_transactions,
        subscriptions_total=subscriptions_total,
        total_expense=total_expense,
        balance=income - total_expense,
        category_breakdown=tuple(
            CategoryTotal(name=name, amount=amount)
            for name, amount in ranked[:BREAKDOWN_LIMIT]
        ),
    )


def transactions_for_month(data: DataSet, reference_month: str) -> list:
    """Transactions dated in the reference month, in stored order."""
    _check_month(reference_month)
    return [t for t in data.transactions if t.in_month(reference_month)]
