"""AI Agents package."""

from moni.agents.advisor import (
    ExternalServiceError,
    FinancialAdvisorAgent,
    build_advisor_prompt,
)

__all__ = [
    "ExternalServiceError",
    "FinancialAdvisorAgent",
    "build_advisor_prompt",
]
