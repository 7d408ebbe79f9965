"""
Core Data Models for Moni

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the JSON shape of the original backups (amounts as numbers)
4. Be immutable snapshots, so derived views can never mutate the store

DESIGN DECISION: The wire format uses the camelCase keys of the original
browser app (billingDay, reminderType, apiKey...). Python code uses
snake_case attribute names; aliases bridge the two.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)


CATEGORY_SEPARATOR = ":"
DEFAULT_REMINDER_DAYS = 3


def new_id() -> str:
    """Fresh entity id (uuid4, 122 random bits)."""
    return str(uuid4())


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a money movement."""
    INCOME = "income"
    EXPENSE = "expense"


class ReminderType(str, Enum):
    """
    What a subscription reminder is about.

    PAYMENT warns ahead of a charge (configurable window).
    CANCEL warns a week ahead so the user can cancel before renewal.
    """
    NONE = "none"
    PAYMENT = "payment"
    CANCEL = "cancel"


# =============================================================================
# CATEGORY LABEL - two-level hierarchy
# =============================================================================

class CategoryLabel(BaseModel):
    """
    A "Group:Subgroup" category string and its two levels.

    The text is kept exactly as entered and is what gets serialized.
    `group` is the text before the first separator, untrimmed, so
    "Food" and " Food" aggregate separately.
    """
    model_config = ConfigDict(frozen=True)

    raw: str = Field(
        ...,
        description="Category exactly as entered"
    )

    @classmethod
    def parse(cls, raw: str) -> "CategoryLabel":
        return cls(raw=raw)

    @property
    def group(self) -> str:
        """Top-level label used for aggregation."""
        return self.raw.partition(CATEGORY_SEPARATOR)[0]

    @property
    def sub(self) -> Optional[str]:
        """Second-level label for display, stripped; None without a separator."""
        _, separator, sub = self.raw.partition(CATEGORY_SEPARATOR)
        return sub.strip() if separator else None

    def __str__(self) -> str:
        return self.raw


def _coerce_category(value: Any) -> Any:
    if isinstance(value, str):
        return CategoryLabel.parse(value)
    return value


Category = Annotated[
    CategoryLabel,
    BeforeValidator(_coerce_category),
    PlainSerializer(str, return_type=str),
]


def _money_to_json(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Exact in Python, a plain JSON number on the wire
Money = Annotated[
    Decimal,
    Field(ge=0, description="Non-negative amount"),
    PlainSerializer(_money_to_json, when_used="json"),
]


def _check_iso_day(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Not a valid calendar date: {value}")
    return value


# =============================================================================
# CORE ENTITIES
# =============================================================================

class Transaction(BaseModel):
    """
    A single dated money movement.

    `date` stays an ISO YYYY-MM-DD string: month membership is a string
    prefix test against a YYYY-MM key.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique transaction ID"
    )
    type: TransactionType = Field(
        ...,
        description="income or expense"
    )
    amount: Money
    category: Category
    description: str = Field(
        default="",
        description="Free-text note"
    )
    # Declared last: the field name shadows datetime.date in the class body
    date: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="ISO date YYYY-MM-DD"
    )

    @field_validator('description', mode='before')
    @classmethod
    def empty_description(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('date')
    @classmethod
    def validate_date(cls, v: str) -> str:
        return _check_iso_day(v)

    def in_month(self, reference_month: str) -> bool:
        """True if the date falls in the YYYY-MM reference month."""
        return self.date.startswith(reference_month)

    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME


class Subscription(BaseModel):
    """
    A recurring monthly obligation.

    Inactive subscriptions stay stored and listed, but are excluded from
    totals and reminders.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique subscription ID"
    )
    name: str = Field(
        ...,
        description="Friendly name (e.g. 'Netflix', 'Rent')"
    )
    amount: Money
    category: Category
    billing_day: int = Field(
        ...,
        ge=1,
        le=31,
        alias="billingDay",
        description="Day of month the charge recurs on"
    )
    active: bool = True
    reminder_type: ReminderType = Field(
        default=ReminderType.NONE,
        alias="reminderType",
    )
    reminder_days: Optional[int] = Field(
        default=None,
        ge=0,
        alias="reminderDays",
        description="Payment reminder window in days"
    )

    @field_validator('reminder_type', mode='before')
    @classmethod
    def missing_reminder_is_none(cls, v: Any) -> Any:
        return ReminderType.NONE if v is None else v

    @property
    def reminder_threshold(self) -> int:
        """Payment reminder window, falling back to the default."""
        if self.reminder_days is None:
            return DEFAULT_REMINDER_DAYS
        return self.reminder_days


class StoredAnalysis(BaseModel):
    """Cached advisor output. Written only by the advisor flow."""
    model_config = ConfigDict(frozen=True)

    text: str
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the analysis was produced"
    )


class DataSet(BaseModel):
    """
    The aggregate root and the unit of persistence, import and export.

    Transactions are most-recent-first, subscriptions in creation order.
    Ids are unique within each collection independently.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    transactions: tuple[Transaction, ...] = ()
    subscriptions: tuple[Subscription, ...] = ()
    analysis: Optional[StoredAnalysis] = None
    api_key: Optional[str] = Field(
        default=None,
        alias="apiKey",
        description="Credential for the external advisor"
    )

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'DataSet':
        """Reject duplicate ids inside a collection."""
        for label, items in (
            ("transaction", self.transactions),
            ("subscription", self.subscriptions),
        ):
            seen = set()
            for item in items:
                if item.id in seen:
                    raise ValueError(f"Duplicate {label} id: {item.id}")
                seen.add(item.id)
        return self

    @property
    def active_subscriptions(self) -> list[Subscription]:
        return [s for s in self.subscriptions if s.active]

    def to_wire(self) -> dict:
        """JSON-ready dict with the persisted key names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# PARTIAL UPDATES
# =============================================================================

class TransactionPatch(BaseModel):
    """
    Fields to replace on an existing transaction.

    Only fields explicitly set are applied. `id` is not accepted.
    """
    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    type: Optional[TransactionType] = None
    amount: Optional[Money] = None
    category: Optional[Category] = None
    description: Optional[str] = None
    date: Optional[str] = None


class SubscriptionPatch(BaseModel):
    """Fields to replace on an existing subscription. `id` is not accepted."""
    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: Optional[str] = None
    amount: Optional[Money] = None
    category: Optional[Category] = None
    billing_day: Optional[int] = Field(default=None, alias="billingDay")
    active: Optional[bool] = None
    reminder_type: Optional[ReminderType] = Field(default=None, alias="reminderType")
    reminder_days: Optional[int] = Field(default=None, alias="reminderDays")


# =============================================================================
# DERIVED VIEW MODELS
# =============================================================================

class CategoryTotal(BaseModel):
    """One slice of the category breakdown."""
    model_config = ConfigDict(frozen=True)

    name: str
    amount: Decimal


class MonthlySummary(BaseModel):
    """
    Monthly aggregate for one reference month.

    Amounts are exact Decimals; rounding is a presentation concern.
    """
    model_config = ConfigDict(frozen=True)

    reference_month: str
    income: Decimal
    expense_from_transactions: Decimal
    subscriptions_total: Decimal
    total_expense: Decimal
    balance: Decimal
    category_breakdown: tuple[CategoryTotal, ...] = ()

    @property
    def breakdown_dict(self) -> dict[str, Decimal]:
        """Breakdown as {group: amount}, preserving rank order."""
        return {item.name: item.amount for item in self.category_breakdown}


class Alert(BaseModel):
    """A subscription whose next billing date is inside its reminder window."""
    model_config = ConfigDict(frozen=True)

    subscription: Subscription
    days_until: int = Field(ge=0)
    kind: ReminderType
    due_date: date


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ImportErrorKind(str, Enum):
    """Why an import blob was rejected."""
    MALFORMED = "malformed"            # Not parseable as a JSON object
    SCHEMA_INVALID = "schema_invalid"  # Parsed, but not a valid data set


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field or path with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_type', 'unknown_category')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ImportResult(BaseModel):
    """
    Outcome of importing a backup blob.

    Failures are values, not exceptions: `success` is False, `error_kind`
    says which stage rejected the blob, `message` is ready for the user.
    """

    success: bool
    message: str
    error_kind: Optional[ImportErrorKind] = None
    data_set: Optional[DataSet] = None
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)
