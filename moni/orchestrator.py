"""
Main Orchestrator for Moni

This module ties together all the components and defines the
end-to-end flows for:
1. Dashboard (store → summary + reminders for "today")
2. Advisor (store → summary → prompt → Gemini → store.save_analysis)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Derived views are recomputed from store.get() on every request
- The advisor never writes to the store itself
- Only one advisor request can be in flight at a time
- Every failure is audited and returned as a value
"""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from moni.agents import ExternalServiceError, FinancialAdvisorAgent, build_advisor_prompt
from moni.audit import AuditLogger
from moni.engine import compute_reminders, compute_summary, month_key
from moni.models.finance import Alert, MonthlySummary, StoredAnalysis
from moni.services.storage import LocalFileSlot, StorageSlot
from moni.store import DataStore


class AdvisorBusyError(Exception):
    """An advisor request is already in flight."""
    pass


class DashboardView(BaseModel):
    """Everything the dashboard renders, computed in one pass."""
    model_config = ConfigDict(frozen=True)

    summary: MonthlySummary
    reminders: tuple[Alert, ...]
    analysis: Optional[StoredAnalysis] = None


class AdvisorOutcome(BaseModel):
    """Result of one advisor run, ready to show as a notice."""

    success: bool
    message: str
    analysis: Optional[StoredAnalysis] = None


class DashboardFlow:
    """Computes the dashboard from the current store contents."""

    def __init__(self, store: DataStore):
        self._store = store

    def build(
        self,
        today: Union[date, datetime, None] = None,
        reference_month: Optional[str] = None,
    ) -> DashboardView:
        """
        Build the dashboard for `today`.

        Args:
            today: Clock reading; defaults to date.today()
            reference_month: Month to summarize; defaults to today's month
        """
        today = today or date.today()
        if isinstance(today, datetime):
            today = today.date()

        data = self._store.get()
        return DashboardView(
            summary=compute_summary(data, reference_month or month_key(today)),
            reminders=tuple(compute_reminders(data.subscriptions, today)),
            analysis=data.analysis,
        )


class AdvisorFlow:
    """
    Orchestrates the advisor request.

    Flow:
    1. Guard → refuse if a request is already in flight
    2. Summarize → compute_summary for the reference month
    3. Prompt → build_advisor_prompt from summary + subscriptions
    4. Ask → FinancialAdvisorAgent.analyze with the stored credential
    5. Store → store.save_analysis on success only

    The in-flight flag is set before the await and cleared in finally,
    so a failed request can simply be retried.
    """

    def __init__(
        self,
        store: DataStore,
        agent: Optional[FinancialAdvisorAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._agent = agent or FinancialAdvisorAgent()
        self._audit_logger = audit_logger or AuditLogger()
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        """True while a request is running; the trigger should be disabled."""
        return self._in_flight

    async def run(
        self,
        today: Union[date, datetime, None] = None,
        reference_month: Optional[str] = None,
    ) -> AdvisorOutcome:
        """
        Request a fresh analysis and store it.

        Returns:
            AdvisorOutcome; failures carry a user-facing message

        Raises:
            AdvisorBusyError: If a request is already in flight
        """
        if self._in_flight:
            raise AdvisorBusyError("An analysis is already being generated")

        today = today or date.today()
        if isinstance(today, datetime):
            today = today.date()

        self._in_flight = True
        try:
            data = self._store.get()
            summary = compute_summary(data, reference_month or month_key(today))
            prompt = build_advisor_prompt(summary, data.subscriptions)

            try:
                text = await self._agent.analyze(prompt, api_key=data.api_key)
            except ExternalServiceError as e:
                self._audit_logger.log_external_service_error(
                    service=e.service,
                    error_message=str(e),
                )
                return AdvisorOutcome(
                    success=False,
                    message=f"The advisor is unavailable right now: {e}",
                )

            analysis = self._store.save_analysis(text)
            return AdvisorOutcome(
                success=True,
                message="Analysis updated.",
                analysis=analysis,
            )
        finally:
            self._in_flight = False


def create_app_components(
    slot: Optional[StorageSlot] = None,
    agent: Optional[FinancialAdvisorAgent] = None,
) -> tuple[DataStore, DashboardFlow, AdvisorFlow]:
    """
    Factory function to create all application components.

    Args:
        slot: Persistent slot. Defaults to the configured local file.
        agent: Advisor agent. Defaults to the Gemini agent.

    Returns:
        (store, dashboard_flow, advisor_flow), with the store already loaded
    """
    audit_logger = AuditLogger()
    store = DataStore(slot or LocalFileSlot(), audit_logger=audit_logger)
    store.load()

    dashboard_flow = DashboardFlow(store)
    advisor_flow = AdvisorFlow(
        store,
        agent=agent,
        audit_logger=audit_logger,
    )

    return store, dashboard_flow, advisor_flow
