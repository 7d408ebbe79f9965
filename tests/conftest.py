"""Shared fixtures: isolated settings, an in-memory store and sample data."""

from decimal import Decimal

import pytest

from moni.audit import AuditLogger
from moni.config import get_settings
from moni.models import (
    DataSet,
    ReminderType,
    StoredAnalysis,
    Subscription,
    Transaction,
    TransactionType,
)
from moni.services.storage import InMemorySlot
from moni.store import DataStore


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point storage at a temp dir and drop env overrides from the host."""
    for name in (
        "MONI_STORAGE_KEY",
        "MONI_EXPORT_PREFIX",
        "GEMINI_API_KEY",
        "GEMINI_MODEL_NAME",
        "CURRENCY_SYMBOL",
        "FUTURE_DATE_TOLERANCE_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MONI_DATA_DIR", str(tmp_path / "data"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def slot():
    return InMemorySlot(key="test_slot")


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def store(slot, audit_logger):
    store = DataStore(slot, audit_logger=audit_logger)
    store.load()
    return store


@pytest.fixture
def sample_data():
    """A small data set touching every field."""
    return DataSet(
        transactions=(
            Transaction(
                id="t-2",
                type=TransactionType.EXPENSE,
                amount=Decimal("40"),
                category="Food: Groceries",
                description="Weekly shop",
                date="2024-05-02",
            ),
            Transaction(
                id="t-1",
                type=TransactionType.INCOME,
                amount=Decimal("100"),
                category="Salary",
                date="2024-05-01",
            ),
        ),
        subscriptions=(
            Subscription(
                id="s-1",
                name="Streaming",
                amount=Decimal("20"),
                category="Food",
                billing_day=15,
                reminder_type=ReminderType.PAYMENT,
                reminder_days=7,
            ),
            Subscription(
                id="s-2",
                name="Gym",
                amount=Decimal("35.50"),
                category="Health: Gym / Sports",
                billing_day=1,
                active=False,
            ),
        ),
        analysis=StoredAnalysis(text="Looking fine."),
        api_key="secret-key",
    )
