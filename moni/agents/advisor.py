"""
Financial Advisor Agent

DESIGN DECISION: The advisor is an opaque text generator. It receives a
prompt built deterministically from the monthly summary and the active
subscriptions, and returns free text. It never sees the raw transaction
log and never writes to the store; the orchestrator stores its output.

CRITICAL BOUNDARIES:
- CAN: Comment on the numbers it is given
- CANNOT: Modify data
- MUST: Fail loudly (ExternalServiceError) instead of returning filler text
"""

from typing import Callable, Iterable, Optional

import google.generativeai as genai

from moni.config import get_settings
from moni.formatting import format_currency
from moni.models.finance import MonthlySummary, Subscription


class ExternalServiceError(Exception):
    """The advisor service could not produce an analysis."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(message)


def build_advisor_prompt(
    summary: MonthlySummary,
    subscriptions: Iterable[Subscription],
    format_amount: Callable = format_currency,
) -> str:
    """
    Build the advisor prompt from derived data only.

    Args:
        summary: Summary for the month being analyzed
        subscriptions: All subscriptions; only active ones are listed
        format_amount: Currency formatter (presentation collaborator)
    """
    breakdown = "\n".join(
        f"- {item.name}: {format_amount(item.amount)}"
        for item in summary.category_breakdown
    ) or "- (no expenses recorded)"

    active = [s for s in subscriptions if s.active]
    subscription_lines = "\n".join(
        f"- {s.name} ({s.category}): {format_amount(s.amount)}, billed on day {s.billing_day}"
        for s in active
    ) or "- (no active subscriptions)"

    return f"""You are a personal finance advisor reviewing one month of a household budget.

Month: {summary.reference_month}
Income: {format_amount(summary.income)}
Total expenses: {format_amount(summary.total_expense)}
  (of which recurring subscriptions: {format_amount(summary.subscriptions_total)})
Balance: {format_amount(summary.balance)}

Top expense categories:
{breakdown}

Active subscriptions:
{subscription_lines}

Give a short analysis of this month:
1. One sentence on overall health (is the balance positive, how tight is it)
2. The two or three categories worth watching, with a concrete saving idea each
3. Any subscription that looks worth reviewing or cancelling

Use only the numbers above. Do not invent transactions. Keep it under 250 words."""


class FinancialAdvisorAgent:
    """
    Gemini-backed advisor.

    The credential comes from the caller (normally the data set's apiKey),
    falling back to GEMINI_API_KEY.
    """

    def __init__(self):
        self._settings = get_settings().gemini

    def _get_model(self, api_key: str) -> "genai.GenerativeModel":
        """Configure Google Generative AI for this credential."""
        genai.configure(api_key=api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    async def analyze(self, prompt: str, api_key: Optional[str] = None) -> str:
        """
        Ask the model for an analysis.

        Raises:
            ExternalServiceError: No credential, the call failed,
                or the model returned no text
        """
        api_key = api_key or self._settings.api_key
        if not api_key:
            raise ExternalServiceError(
                "gemini",
                "No API key configured. Add one in the data settings.",
            )

        try:
            model = self._get_model(api_key)
            response = await model.generate_content_async(prompt)
            text = response.text.strip()
        except Exception as e:
            raise ExternalServiceError("gemini", f"Gemini request failed: {e}") from e

        if not text:
            raise ExternalServiceError("gemini", "Gemini returned an empty analysis")
        return text
