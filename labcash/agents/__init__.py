"""AI Agents package."""

from labcash.agents.ai_agents import (
    API_KEY_MISSING_MESSAGE,
    FAILED_MESSAGE,
    NO_DATA_MESSAGE,
    MonthlySummary,
    SummaryAgent,
)

__all__ = [
    "API_KEY_MISSING_MESSAGE",
    "FAILED_MESSAGE",
    "NO_DATA_MESSAGE",
    "MonthlySummary",
    "SummaryAgent",
]
