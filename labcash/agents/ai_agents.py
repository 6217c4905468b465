"""
AI Agent for LabCash

DESIGN DECISION: The AI writes prose, never numbers.

SUMMARY AGENT:
- CAN: Describe a month that was already computed by the engine
- CAN: Point out the best shift and trends in the entries it is shown
- CANNOT: Change, save or recompute any record
- CANNOT: Crash the app: every service failure becomes a message

The LLM is a NARRATOR, not an ACCOUNTANT.
Every figure in the prompt comes from the MonthlyReport.
"""

import asyncio
from typing import Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field
from tenacity import retry, stop_after_attempt, wait_exponential

from labcash.config import GeminiSettings, get_settings
from labcash.engine.constants import SHIFT_RANK
from labcash.models.statement import MonthlyReport
from labcash.reports.formatting import format_currency


logger = structlog.get_logger(__name__)


API_KEY_MISSING_MESSAGE = (
    "API key is missing. Please set GEMINI_API_KEY to use AI features."
)
FAILED_MESSAGE = (
    "Failed to generate report due to an API error. Please try again later."
)
NO_DATA_MESSAGE = (
    "There are no revenue entries for this month yet, so there is nothing to analyse."
)
EMPTY_RESPONSE_MESSAGE = "No analysis could be generated."


class MonthlySummary(BaseModel):
    """
    Outcome of one summary request.

    text is always safe to show to the user, whether or not the
    model was reached.
    """

    text: str
    generated: bool = Field(
        default=False,
        description="True only when the text came from the model"
    )
    error: Optional[str] = Field(
        default=None,
        description="Short reason when generated is False"
    )


class SummaryAgent:
    """
    Writes the monthly narrative summary with Gemini.

    RESPONSIBILITIES:
    - Turn a MonthlyReport into a prompt
    - Call the model with retries and an overall timeout
    - Degrade to a fixed message on any failure

    BOUNDARIES:
    - NEVER mutates records
    - NEVER raises for service failures
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model=None,
    ):
        """
        Args:
            settings: Gemini settings (defaults to the environment)
            model: Pre-built model object exposing generate_content_async.
                   Used by tests; normally built from settings.
        """
        self._settings = settings or get_settings().gemini
        self._currency = get_settings().app.currency_code
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    @property
    def model_name(self) -> str:
        return self._settings.model_name

    def build_prompt(self, report: MonthlyReport) -> str:
        """Describe the month to the model using only engine figures."""
        s = report.statement
        money = lambda value: format_currency(value, self._currency)  # noqa: E731

        entries = sorted(
            report.entries,
            key=lambda e: (e.record_date, SHIFT_RANK[e.shift]),
        )
        raw_lines = "\n".join(
            f"{e.record_date.isoformat()} ({e.shift.value}): {e.amount} {self._currency}"
            for e in entries
        )

        best = report.best_shift
        best_line = (
            f"- Highest earning shift by total: {best.shift.value} ({money(best.amount)})"
            if best else "- Highest earning shift: none"
        )

        return f"""You are a financial analyst for a medical laboratory.
Analyze the revenue data for {report.period.label}.
All monetary values are in {self._currency}.

Financial Context:
- Total Revenue: {money(s.total_revenue)}
- Government Share: {money(s.government_share)}
- Gross Staff Pool: {money(s.gross_staff_pool)}
- Shared Expenses (deducted from pool): {money(s.total_expenses)}
- Net Distributable Pool: {money(s.distributable_pool)}
- Number of Staff Members: {s.staff_count}
- Base Share Per Staff Member: {money(s.base_share_per_staff)} (before personal advances)
{best_line}

Raw Data (Date (Shift): Amount):
{raw_lines}

Please provide a concise but professional summary report that includes:
1. A brief overview of the financial performance.
2. Identification of the highest performing shift (Morning, Evening, or Night).
3. Any notable trends or anomalies in the dates provided.
4. A motivating closing remark for the staff.

Use ONLY the figures above. Do NOT invent amounts.
Keep the tone professional and encouraging. Format with Markdown."""

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        reraise=True,
    )
    async def _call_model(self, prompt: str) -> str:
        response = await self._model.generate_content_async(prompt)
        return (response.text or "").strip()

    async def generate_summary(self, report: MonthlyReport) -> MonthlySummary:
        """
        Generate the narrative for one month.

        Returns a MonthlySummary in every case; check .generated.
        """
        if not self.is_available:
            return MonthlySummary(text=API_KEY_MISSING_MESSAGE, error="missing_api_key")

        if not report.has_revenue:
            return MonthlySummary(text=NO_DATA_MESSAGE, error="no_data")

        prompt = self.build_prompt(report)
        try:
            text = await asyncio.wait_for(
                self._call_model(prompt),
                timeout=self._settings.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "summary_timeout",
                period=str(report.period),
                timeout_seconds=self._settings.timeout_seconds,
            )
            return MonthlySummary(text=FAILED_MESSAGE, error="timeout")
        except Exception as e:
            logger.warning("summary_failed", period=str(report.period), error=str(e))
            return MonthlySummary(text=FAILED_MESSAGE, error=str(e) or type(e).__name__)

        if not text:
            return MonthlySummary(text=EMPTY_RESPONSE_MESSAGE, error="empty_response")

        return MonthlySummary(text=text, generated=True)
