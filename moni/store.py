"""
Data Store

The single source of truth for the data set.

DESIGN DECISION: The store is a plain object with get()/subscribe()
and mutator methods, independent of any UI framework:
- Every mutator replaces the immutable DataSet snapshot, persists it,
  then notifies subscribers
- Persistence is attempted on EVERY mutation (no batching); a failed
  write is audited and never raised to the mutating caller
- Loading never raises: a corrupt slot is audited and the store starts
  from an empty data set

There is exactly one writer, so there is no locking; last write wins.
"""

from datetime import date, datetime
from typing import Any, Callable, Optional, Union

from moni.audit import AuditLogger
from moni.config import get_settings
from moni.engine.summary import transactions_for_month
from moni.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from moni.models.finance import (
    DataSet,
    ImportResult,
    StoredAnalysis,
    Subscription,
    SubscriptionPatch,
    Transaction,
    TransactionPatch,
    new_id,
)
from moni.services.storage import (
    StorageReadError,
    StorageSlot,
    StorageWriteError,
)
from moni.validation import DataSetValidator, export_blob


Listener = Callable[[DataSet], None]


class DataStore:
    """
    Owns the canonical DataSet and its persistence.

    Usage:
        store = DataStore(LocalFileSlot())
        store.load()
        unsubscribe = store.subscribe(render)
        store.add_transaction(type="expense", amount="12.50", category="Food: Groceries", date="2024-05-02")
    """

    def __init__(
        self,
        slot: StorageSlot,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the store with an empty data set.

        Call load() to read the persisted slot.

        Args:
            slot: Persistent key-value slot
            audit_logger: Audit log; a local-only logger is created if None
        """
        self._slot = slot
        self._audit = audit_logger or AuditLogger()
        self._data = DataSet()
        self._listeners: list[Listener] = []

    # ── READ ──────────────────────────────────────────────

    def get(self) -> DataSet:
        """Current data set snapshot."""
        return self._data

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call `listener(data_set)` after every change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def transactions_for_month(self, reference_month: str) -> list[Transaction]:
        """Transactions dated in `reference_month` (YYYY-MM), newest first."""
        return transactions_for_month(self._data, reference_month)

    # ── PERSISTENCE ───────────────────────────────────────

    def load(self) -> DataSet:
        """
        Read the persisted slot into the store.

        Absent slot: empty data set. Unreadable or invalid slot: the
        failure is audited and the store falls back to an empty data set.
        """
        try:
            text = self._slot.read()
            if text is None:
                data = DataSet()
            else:
                data = DataSet.model_validate_json(text)
        except (StorageReadError, ValueError) as e:
            # pydantic.ValidationError is a ValueError
            self._audit.log(AuditEventBuilder.storage_read_failed(
                storage_key=self._slot.key,
                error_message=str(e),
            ))
            data = DataSet()
        else:
            self._audit.log(AuditEventBuilder.data_loaded(
                storage_key=self._slot.key,
                transaction_count=len(data.transactions),
                subscription_count=len(data.subscriptions),
            ))

        self._data = data
        self._notify()
        return data

    def save(self, data: Optional[DataSet] = None) -> bool:
        """
        Serialize the whole data set and replace the slot.

        Returns:
            True if the write succeeded. Failures are audited, not raised.
        """
        data = data if data is not None else self._data
        try:
            self._slot.write(data.model_dump_json(by_alias=True, exclude_none=True))
            return True
        except StorageWriteError as e:
            self._audit.log(AuditEventBuilder.save_failed(
                storage_key=self._slot.key,
                error_message=str(e),
            ))
            return False

    def _commit(self, data: DataSet, event: AuditEvent) -> None:
        """
        Install a new snapshot, persist it, audit it, notify listeners.

        The event is built by the caller before anything changes, so
        nothing after the state swap can raise.
        """
        self._data = data
        self.save(data)
        self._audit.log(event)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._data)
            except Exception as e:
                self._audit.log_error(
                    error_type="listener_failed",
                    error_message=str(e),
                    details={"listener": getattr(listener, "__name__", repr(listener))},
                )

    # ── TRANSACTIONS ──────────────────────────────────────

    def add_transaction(self, **fields: Any) -> Transaction:
        """
        Create a transaction at the head of the list.

        A fresh id is always generated; an `id` in `fields` is ignored.

        Raises:
            pydantic.ValidationError: If the fields do not form a valid transaction
        """
        fields.pop("id", None)
        transaction = Transaction.model_validate({**fields, "id": new_id()})
        self._commit(
            self._data.model_copy(update={
                "transactions": (transaction, *self._data.transactions),
            }),
            AuditEventBuilder.entity_changed(
                AuditEventType.TRANSACTION_ADDED, "transaction", transaction.id,
            ),
        )
        return transaction

    def edit_transaction(
        self,
        transaction_id: str,
        patch: Union[TransactionPatch, dict, None] = None,
        **fields: Any,
    ) -> Optional[Transaction]:
        """
        Replace only the given fields of a transaction.

        Args:
            transaction_id: Transaction to edit
            patch: TransactionPatch or dict of fields; merged with **fields

        Returns:
            The updated transaction, or None if the id is unknown

        Raises:
            pydantic.ValidationError: If a field is invalid or `id` is given
        """
        updates = _patch_fields(TransactionPatch, patch, fields)
        updated = None
        transactions = []
        for tx in self._data.transactions:
            if tx.id == transaction_id:
                tx = updated = Transaction.model_validate({**tx.model_dump(), **updates})
            transactions.append(tx)

        if updated is None:
            return None

        self._commit(
            self._data.model_copy(update={"transactions": tuple(transactions)}),
            AuditEventBuilder.entity_changed(
                AuditEventType.TRANSACTION_EDITED, "transaction", transaction_id,
                details={"fields": sorted(updates)},
            ),
        )
        return updated

    def delete_transaction(self, transaction_id: str) -> bool:
        """
        Delete a transaction by id.

        Returns:
            True if something was deleted. Unknown ids are a no-op.
        """
        remaining = tuple(t for t in self._data.transactions if t.id != transaction_id)
        if len(remaining) == len(self._data.transactions):
            return False

        self._commit(
            self._data.model_copy(update={"transactions": remaining}),
            AuditEventBuilder.entity_changed(
                AuditEventType.TRANSACTION_DELETED, "transaction", transaction_id,
            ),
        )
        return True

    # ── SUBSCRIPTIONS ─────────────────────────────────────

    def add_subscription(self, **fields: Any) -> Subscription:
        """
        Append a subscription (creation order is kept).

        Raises:
            pydantic.ValidationError: If the fields do not form a valid subscription
        """
        fields.pop("id", None)
        subscription = Subscription.model_validate({**fields, "id": new_id()})
        self._commit(
            self._data.model_copy(update={
                "subscriptions": (*self._data.subscriptions, subscription),
            }),
            AuditEventBuilder.entity_changed(
                AuditEventType.SUBSCRIPTION_ADDED, "subscription", subscription.id,
            ),
        )
        return subscription

    def edit_subscription(
        self,
        subscription_id: str,
        patch: Union[SubscriptionPatch, dict, None] = None,
        **fields: Any,
    ) -> Optional[Subscription]:
        """
        Replace only the given fields of a subscription.

        Returns:
            The updated subscription, or None if the id is unknown
        """
        updates = _patch_fields(SubscriptionPatch, patch, fields)
        return self._replace_subscription(
            subscription_id,
            lambda sub: Subscription.model_validate({**sub.model_dump(), **updates}),
            lambda sub: AuditEventBuilder.entity_changed(
                AuditEventType.SUBSCRIPTION_EDITED, "subscription", subscription_id,
                details={"fields": sorted(updates)},
            ),
        )

    def toggle_subscription(self, subscription_id: str) -> Optional[Subscription]:
        """
        Flip a subscription's `active` flag.

        Returns:
            The updated subscription, or None if the id is unknown
        """
        return self._replace_subscription(
            subscription_id,
            lambda sub: sub.model_copy(update={"active": not sub.active}),
            lambda sub: AuditEventBuilder.entity_changed(
                AuditEventType.SUBSCRIPTION_TOGGLED, "subscription", subscription_id,
                details={"active": sub.active},
            ),
        )

    def delete_subscription(self, subscription_id: str) -> bool:
        """
        Delete a subscription by id.

        Returns:
            True if something was deleted. Unknown ids are a no-op.
        """
        remaining = tuple(s for s in self._data.subscriptions if s.id != subscription_id)
        if len(remaining) == len(self._data.subscriptions):
            return False

        self._commit(
            self._data.model_copy(update={"subscriptions": remaining}),
            AuditEventBuilder.entity_changed(
                AuditEventType.SUBSCRIPTION_DELETED, "subscription", subscription_id,
            ),
        )
        return True

    def _replace_subscription(
        self,
        subscription_id: str,
        change: Callable[[Subscription], Subscription],
        audit: Callable[[Subscription], AuditEvent],
    ) -> Optional[Subscription]:
        updated = None
        subscriptions = []
        for sub in self._data.subscriptions:
            if sub.id == subscription_id:
                sub = updated = change(sub)
            subscriptions.append(sub)

        if updated is not None:
            self._commit(
                self._data.model_copy(update={"subscriptions": tuple(subscriptions)}),
                audit(updated),
            )
        return updated

    # ── ADVISOR STATE ─────────────────────────────────────

    def set_credential(self, api_key: Optional[str]) -> None:
        """Store (or with None/blank, remove) the advisor credential."""
        api_key = api_key.strip() if api_key else None
        self._commit(
            self._data.model_copy(update={"api_key": api_key or None}),
            AuditEventBuilder.credential_updated(has_credential=bool(api_key)),
        )

    def save_analysis(
        self,
        text: str,
        timestamp: Optional[datetime] = None,
    ) -> StoredAnalysis:
        """Cache an advisor result together with when it was produced."""
        analysis = StoredAnalysis(text=text, timestamp=timestamp or datetime.now())
        self._commit(
            self._data.model_copy(update={"analysis": analysis}),
            AuditEventBuilder.analysis_saved(length=len(text)),
        )
        return analysis

    # ── IMPORT / EXPORT / CLEAR ───────────────────────────

    def import_blob(self, text: Any, today: Optional[date] = None) -> ImportResult:
        """
        Replace the whole data set with a validated backup.

        On failure nothing changes. Never raises.
        """
        result = DataSetValidator(today=today).validate(text)

        if not result.success:
            self._audit.log(AuditEventBuilder.import_rejected(
                error_kind=result.error_kind.value,
                issues=[issue.model_dump() for issue in result.issues],
            ))
            return result

        self._commit(
            result.data_set,
            AuditEventBuilder.import_succeeded(
                transaction_count=len(result.data_set.transactions),
                subscription_count=len(result.data_set.subscriptions),
                warnings=result.warnings,
            ),
        )
        return result

    def export_blob(self) -> str:
        """Backup text for the current data set."""
        return export_blob(self._data)

    def export_filename(self, today: Optional[date] = None) -> str:
        """Backup file name with the date embedded, e.g. moni_backup_2024-05-02.json."""
        today = today or date.today()
        prefix = get_settings().storage.export_prefix
        return f"{prefix}_{today.isoformat()}.json"

    def export_backup(self, today: Optional[date] = None) -> tuple[str, str]:
        """
        Produce a downloadable backup.

        Returns:
            (filename, text)
        """
        filename = self.export_filename(today)
        text = self.export_blob()
        self._audit.log(AuditEventBuilder.export_created(filename=filename, size=len(text)))
        return filename, text

    def clear_all(self) -> None:
        """
        Reset to an empty data set and persist it.

        Deliberate operation: asking the user for confirmation is the
        caller's job. Nothing in the store calls this implicitly.
        """
        self._commit(DataSet(), AuditEventBuilder.data_cleared())


def _patch_fields(
    patch_model: type,
    patch: Union[TransactionPatch, SubscriptionPatch, dict, None],
    fields: dict,
) -> dict:
    """Validate a patch and return only the explicitly set fields."""
    if patch is None:
        patch = {}
    if isinstance(patch, dict):
        patch = patch_model.model_validate({**patch, **fields})
    elif fields:
        patch = patch_model.model_validate({
            **patch.model_dump(exclude_unset=True),
            **fields,
        })
    return patch.model_dump(exclude_unset=True)
