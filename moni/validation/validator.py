"""
Import/Export Validation

DESIGN DECISION: An import blob passes through three gates:

STAGE 0 - PARSE:
- Must be JSON whose top level is an object
- Failure: ImportErrorKind.MALFORMED

STAGE 1 - SCHEMA VALIDATION:
- `transactions` and `subscriptions` present and both arrays
- Every entity matches its model, ids unique per collection
- Failure: ImportErrorKind.SCHEMA_INVALID

STAGE 2 - SEMANTIC VALIDATION:
- Categories outside the catalogue
- Transactions dated in the future
- Payment reminder windows longer than a month
- Never blocks the import; issues are returned as warnings

IMPORTANT: Validation NEVER silently fixes data and NEVER raises.
Every outcome is an ImportResult the caller can show to the user.
"""

import json
from datetime import date, timedelta
from typing import Any, Optional

from pydantic import ValidationError

from moni.config import get_settings
from moni.models.categories import is_known_category
from moni.models.finance import (
    DataSet,
    ImportErrorKind,
    ImportResult,
    ReminderType,
    TransactionType,
    ValidationIssue,
)


REQUIRED_COLLECTIONS = ("transactions", "subscriptions")

IMPORT_OK_MESSAGE = "Data imported successfully."
MALFORMED_MESSAGE = "Could not read the file: it is not valid JSON data."
SCHEMA_INVALID_MESSAGE = "Invalid file format: this is not a Moni backup."


def export_blob(data: DataSet) -> str:
    """
    Serialize the whole data set for a backup file.

    The output is exactly what import_blob accepts.
    """
    return json.dumps(data.to_wire(), indent=2, ensure_ascii=False)


class DataSetValidator:
    """
    Validates backup blobs before they are allowed to replace the store.

    Stage 0/1 decide success; stage 2 only adds warnings.
    """

    def __init__(self, today: Optional[date] = None):
        """
        Initialize validator.

        Args:
            today: Reference day for future-date checks. Defaults to date.today().
        """
        self._today = today
        self._settings = get_settings().app

    def _parse(self, text: str) -> tuple[Optional[dict], list[ValidationIssue]]:
        """Stage 0: text to a JSON object."""
        try:
            parsed = json.loads(text)
        except (TypeError, ValueError) as e:
            return None, [ValidationIssue(
                field="$",
                issue_type="malformed",
                message=f"Not valid JSON: {e}",
                severity="error",
            )]

        if not isinstance(parsed, dict):
            return None, [ValidationIssue(
                field="$",
                issue_type="malformed",
                message=f"Expected a JSON object, got {type(parsed).__name__}",
                severity="error",
            )]

        return parsed, []

    def _validate_schema(
        self,
        parsed: dict,
    ) -> tuple[Optional[DataSet], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Checks:
        - Required collections present and arrays
        - Entity schemas, via the pydantic models
        - Id uniqueness per collection

        Returns: (data_set or None, list_of_issues)
        """
        issues = []

        for name in REQUIRED_COLLECTIONS:
            if name not in parsed:
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="missing",
                    message=f"Required collection '{name}' is missing",
                    severity="error",
                ))
            elif not isinstance(parsed[name], list):
                issues.append(ValidationIssue(
                    field=name,
                    issue_type="invalid_type",
                    message=f"'{name}' must be an array, got {type(parsed[name]).__name__}",
                    severity="error",
                ))

        if issues:
            return None, issues

        try:
            return DataSet.model_validate(parsed), []
        except ValidationError as e:
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"]) or "$"
                issues.append(ValidationIssue(
                    field=location,
                    issue_type=error["type"],
                    message=f"{location}: {error['msg']}",
                    severity="error",
                ))
            return None, issues

    def _validate_semantic(self, data: DataSet) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Checks:
        - Unknown categories
        - Future transaction dates (with tolerance)
        - Reminder windows longer than a month

        Returns: list of warning issues
        """
        issues = []
        today = self._today or date.today()
        latest_allowed = today + timedelta(days=self._settings.future_date_tolerance_days)

        for index, tx in enumerate(data.transactions):
            if not is_known_category(tx.category, tx.type):
                issues.append(ValidationIssue(
                    field=f"transactions.{index}.category",
                    issue_type="unknown_category",
                    message=f"Transaction {tx.id} uses an unlisted category '{tx.category}'",
                    severity="warning",
                ))
            if date.fromisoformat(tx.date) > latest_allowed:
                issues.append(ValidationIssue(
                    field=f"transactions.{index}.date",
                    issue_type="future_date",
                    message=f"Transaction {tx.id} is dated in the future ({tx.date})",
                    severity="warning",
                ))

        for index, sub in enumerate(data.subscriptions):
            if not is_known_category(sub.category, TransactionType.EXPENSE):
                issues.append(ValidationIssue(
                    field=f"subscriptions.{index}.category",
                    issue_type="unknown_category",
                    message=f"Subscription '{sub.name}' uses an unlisted category '{sub.category}'",
                    severity="warning",
                ))
            if (
                sub.reminder_type == ReminderType.PAYMENT
                and sub.reminder_threshold > 31
            ):
                issues.append(ValidationIssue(
                    field=f"subscriptions.{index}.reminderDays",
                    issue_type="suspicious_value",
                    message=(
                        f"Subscription '{sub.name}' reminds {sub.reminder_threshold} "
                        "days ahead, so it will always be shown"
                    ),
                    severity="warning",
                ))

        return issues

    def validate(self, text: Any) -> ImportResult:
        """
        Run the full pipeline on an import blob.

        Args:
            text: The raw file contents

        Returns:
            ImportResult; data_set is set only on success
        """
        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                return ImportResult(
                    success=False,
                    message=MALFORMED_MESSAGE,
                    error_kind=ImportErrorKind.MALFORMED,
                    issues=[ValidationIssue(
                        field="$",
                        issue_type="malformed",
                        message=f"Not UTF-8 text: {e}",
                        severity="error",
                    )],
                )

        parsed, issues = self._parse(text)
        if parsed is None:
            return ImportResult(
                success=False,
                message=MALFORMED_MESSAGE,
                error_kind=ImportErrorKind.MALFORMED,
                issues=issues,
            )

        data, issues = self._validate_schema(parsed)
        if data is None:
            return ImportResult(
                success=False,
                message=SCHEMA_INVALID_MESSAGE,
                error_kind=ImportErrorKind.SCHEMA_INVALID,
                issues=issues,
            )

        return ImportResult(
            success=True,
            message=IMPORT_OK_MESSAGE,
            data_set=data,
            issues=self._validate_semantic(data),
        )

    def get_user_friendly_summary(self, result: ImportResult) -> str:
        """
        Generate a user-friendly summary of an import result.

        This is what we show next to the import button.
        """
        lines = [result.message]

        errors = [issue for issue in result.issues if issue.severity == "error"]
        if errors:
            lines.append("")
            for issue in errors[:5]:
                lines.append(f"   • {issue.message}")
            if len(errors) > 5:
                lines.append(f"   • ...and {len(errors) - 5} more")

        if result.success and result.warnings:
            lines.append("")
            lines.append("⚠️ Please review:")
            for warning in result.warnings[:5]:
                lines.append(f"   • {warning}")
            if len(result.warnings) > 5:
                lines.append(f"   • ...and {len(result.warnings) - 5} more")

        return "\n".join(lines)


def import_blob(text: Any, today: Optional[date] = None) -> ImportResult:
    """Validate an import blob with a default validator."""
    return DataSetValidator(today=today).validate(text)
