"""Tests for import/export validation."""

import json
from datetime import date
from decimal import Decimal

import pytest

from moni.models import ImportErrorKind, ReminderType
from moni.validation import DataSetValidator, export_blob, import_blob
from moni.validation.validator import (
    IMPORT_OK_MESSAGE,
    MALFORMED_MESSAGE,
    SCHEMA_INVALID_MESSAGE,
)


TODAY = date(2024, 5, 10)


def _blob(transactions=None, subscriptions=None, **extra):
    return json.dumps({
        "transactions": transactions or [],
        "subscriptions": subscriptions or [],
        **extra,
    })


def _tx(tx_id="t-1", **overrides):
    item = {
        "id": tx_id,
        "type": "expense",
        "amount": 12.5,
        "category": "Food:Groceries",
        "description": "",
        "date": "2024-05-02",
    }
    item.update(overrides)
    return item


class TestExport:
    """Tests for export_blob."""

    def test_export_round_trip(self, sample_data):
        """Test that an export imports back to the same data set."""
        result = import_blob(export_blob(sample_data), today=TODAY)
        assert result.success is True
        assert result.data_set.to_wire() == sample_data.to_wire()

    def test_export_is_readable_json(self, sample_data):
        parsed = json.loads(export_blob(sample_data))
        assert parsed["transactions"][0]["amount"] == 40
        assert parsed["subscriptions"][1]["active"] is False
        assert parsed["apiKey"] == "secret-key"

    def test_export_keeps_non_ascii(self, store):
        store.add_transaction(
            type="expense", amount="3", category="Food: Coffee and Snacks",
            description="Café", date="2024-05-02",
        )
        assert "Café" in store.export_blob()

    def test_export_keeps_category_as_entered(self):
        """Test that separator spacing is not rewritten on the way out."""
        result = import_blob(
            _blob(transactions=[_tx(category="Food:Snacks"), _tx("t-2", category="Food : Bakery")]),
            today=TODAY,
        )
        parsed = json.loads(export_blob(result.data_set))
        assert [t["category"] for t in parsed["transactions"]] == ["Food:Snacks", "Food : Bakery"]

    def test_export_amounts_are_numbers(self):
        result = import_blob(_blob(transactions=[_tx(amount=12.5), _tx("t-2", amount="7")]), today=TODAY)
        parsed = json.loads(export_blob(result.data_set))
        assert parsed["transactions"][0]["amount"] == 12.5
        assert isinstance(parsed["transactions"][0]["amount"], float)
        assert parsed["transactions"][1]["amount"] == 7
        assert isinstance(parsed["transactions"][1]["amount"], int)


class TestMalformed:
    """Tests for blobs that are not JSON objects."""

    @pytest.mark.parametrize("text", ["not json", "", "{", "[]", "42", "null", '"text"'])
    def test_malformed(self, text):
        result = import_blob(text)
        assert result.success is False
        assert result.error_kind == ImportErrorKind.MALFORMED
        assert result.message == MALFORMED_MESSAGE
        assert result.data_set is None

    def test_non_utf8_bytes(self):
        result = import_blob(b"\xff\xfe\x00garbage")
        assert result.error_kind == ImportErrorKind.MALFORMED

    def test_none_input(self):
        result = import_blob(None)
        assert result.error_kind == ImportErrorKind.MALFORMED


class TestSchemaInvalid:
    """Tests for parsed blobs that are not data sets."""

    def test_missing_collection(self):
        result = import_blob(json.dumps({"transactions": []}))
        assert result.success is False
        assert result.error_kind == ImportErrorKind.SCHEMA_INVALID
        assert result.message == SCHEMA_INVALID_MESSAGE
        assert [issue.field for issue in result.issues] == ["subscriptions"]

    def test_collection_wrong_type(self):
        result = import_blob(json.dumps({"transactions": {}, "subscriptions": []}))
        assert result.error_kind == ImportErrorKind.SCHEMA_INVALID
        assert result.issues[0].issue_type == "invalid_type"

    def test_invalid_item(self):
        result = import_blob(_blob(transactions=[_tx(amount=-3)]))
        assert result.error_kind == ImportErrorKind.SCHEMA_INVALID
        assert result.issues[0].field.startswith("transactions.0")

    def test_bad_date(self):
        result = import_blob(_blob(transactions=[_tx(date="2024-02-30")]))
        assert result.error_kind == ImportErrorKind.SCHEMA_INVALID

    def test_duplicate_ids(self):
        result = import_blob(_blob(transactions=[_tx("same"), _tx("same")]))
        assert result.error_kind == ImportErrorKind.SCHEMA_INVALID
        assert "Duplicate transaction id" in result.issues[0].message

    def test_billing_day_out_of_range(self):
        sub = {"id": "s", "name": "X", "amount": 1, "category": "Other", "billingDay": 40}
        result = import_blob(_blob(subscriptions=[sub]))
        assert result.error_kind == ImportErrorKind.SCHEMA_INVALID
        assert result.issues[0].field == "subscriptions.0.billingDay"


class TestAccepted:
    """Tests for blobs that import."""

    def test_browser_backup_shape(self):
        """Test numeric amounts, camelCase keys and missing optional fields."""
        text = _blob(
            transactions=[_tx()],
            subscriptions=[{
                "id": "s-1",
                "name": "Netflix",
                "amount": 15.99,
                "category": "Leisure:Streaming",
                "billingDay": 12,
                "active": True,
            }],
            analysis={"text": "All good.", "timestamp": "2024-05-01T10:00:00"},
            apiKey="key",
        )
        result = import_blob(text, today=TODAY)

        assert result.success is True
        assert result.message == IMPORT_OK_MESSAGE
        data = result.data_set
        assert data.transactions[0].amount == Decimal("12.5")
        assert data.subscriptions[0].amount == Decimal("15.99")
        assert data.subscriptions[0].reminder_type == ReminderType.NONE
        assert data.analysis.text == "All good."
        assert data.api_key == "key"
        assert result.issues == []

    def test_unknown_keys_ignored(self):
        result = import_blob(_blob(transactions=[_tx()], version=2), today=TODAY)
        assert result.success is True

    def test_empty_data_set(self):
        result = import_blob(_blob(), today=TODAY)
        assert result.success is True
        assert result.data_set.transactions == ()

    def test_bytes_with_bom(self):
        text = "\ufeff" + _blob(transactions=[_tx()])
        result = import_blob(text.encode("utf-8"), today=TODAY)
        assert result.success is True

    def test_long_free_text(self):
        """Test that long descriptions, names and categories import."""
        sub = {
            "id": "s", "name": "n" * 300, "amount": 1,
            "category": "Other:" + "c" * 150, "billingDay": 1,
        }
        text = _blob(transactions=[_tx(description="d" * 1500)], subscriptions=[sub])
        result = import_blob(text, today=TODAY)
        assert result.success is True
        assert len(result.data_set.transactions[0].description) == 1500
        assert len(result.data_set.subscriptions[0].name) == 300

    def test_long_ids(self):
        result = import_blob(_blob(transactions=[_tx("x" * 600)]), today=TODAY)
        assert result.success is True


class TestWarnings:
    """Tests for semantic warnings that do not block the import."""

    def test_unknown_category(self):
        result = import_blob(_blob(transactions=[_tx(category="Crypto:Coins")]), today=TODAY)
        assert result.success is True
        assert result.issues[0].issue_type == "unknown_category"
        assert "Crypto:Coins" in result.warnings[0]

    def test_income_category_checked_against_income_list(self):
        result = import_blob(
            _blob(transactions=[_tx(type="income", category="Salary")]),
            today=TODAY,
        )
        assert result.warnings == []

    def test_future_date(self):
        result = import_blob(_blob(transactions=[_tx(date="2024-06-01")]), today=TODAY)
        assert result.success is True
        assert [issue.issue_type for issue in result.issues] == ["future_date"]

    def test_tomorrow_is_tolerated(self):
        result = import_blob(_blob(transactions=[_tx(date="2024-05-11")]), today=TODAY)
        assert result.warnings == []

    def test_long_payment_window(self):
        sub = {
            "id": "s", "name": "Rent", "amount": 1, "category": "Housing:Rent",
            "billingDay": 1, "reminderType": "payment", "reminderDays": 45,
        }
        result = import_blob(_blob(subscriptions=[sub]), today=TODAY)
        assert result.success is True
        assert result.issues[0].issue_type == "suspicious_value"


class TestUserFriendlySummary:
    """Tests for get_user_friendly_summary."""

    def test_success_without_warnings(self):
        validator = DataSetValidator(today=TODAY)
        result = validator.validate(_blob())
        assert validator.get_user_friendly_summary(result) == IMPORT_OK_MESSAGE

    def test_failure_lists_errors(self):
        validator = DataSetValidator(today=TODAY)
        result = validator.validate(json.dumps({}))
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith(SCHEMA_INVALID_MESSAGE)
        assert "'transactions' is missing" in summary
        assert "'subscriptions' is missing" in summary

    def test_many_warnings_truncated(self):
        validator = DataSetValidator(today=TODAY)
        transactions = [_tx(f"t-{i}", category=f"Unknown{i}") for i in range(7)]
        result = validator.validate(_blob(transactions=transactions))
        summary = validator.get_user_friendly_summary(result)
        assert "Please review" in summary
        assert "...and 2 more" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
