"""Text-generation assistant for notifications and gate log summaries.

Uses an OpenAI-compatible chat completions endpoint. Every call falls back
to a fixed text when no API key is configured or the request fails, so
callers never depend on the assistant being reachable.
"""

import json
import os
from typing import Any, Iterable, Mapping, Optional

import structlog
from openai import OpenAI, OpenAIError

from condogest.domain.entities import AccessLog

logger = structlog.get_logger(__name__)

API_KEY_VAR = "OPENAI_API_KEY"
BASE_URL_VAR = "OPENAI_BASE_URL"
MODEL_VAR = "CONDOGEST_ASSISTANT_MODEL"
DEFAULT_MODEL = "gpt-4o-mini"

# Number of most recent logs sent for analysis
ANALYSIS_LOG_LIMIT = 20

NOTIFICATION_PROMPT = (
    "Write a short, polite and professional notification for a resident named "
    '{recipient}. Tell them that a package described as "{item}" has arrived '
    'and is ready for pickup at: "{location}". Keep it under 50 words. '
    "Do not include a subject line."
)

ANALYSIS_PROMPT = (
    "Analyse the following vehicle access logs (JSON) and give a brief bullet "
    "point summary of any anomalies, peak hours or security concerns.\n\n"
    "Logs:\n{logs}"
)


def unconfigured_notification(recipient: str, item: str, location: str) -> str:
    return (
        f"Hello {recipient}, a package ({item}) has arrived for you. "
        f"Please pick it up at: {location}."
    )


def failed_notification(recipient: str, item: str, location: str) -> str:
    return f"Package arrived for {recipient} ({item}). Location: {location}."


UNCONFIGURED_ANALYSIS = "AI analysis is unavailable without an API key. Please review the logs manually."
FAILED_ANALYSIS = "The logs could not be analysed right now."
EMPTY_NOTIFICATION = "Notification could not be generated."
EMPTY_ANALYSIS = "Analysis failed."

# Transport failures and malformed responses both fall back to the canned text
REQUEST_ERRORS = (OpenAIError, IndexError, AttributeError)


def logs_to_json(logs: Iterable[AccessLog]) -> str:
    """Compact JSON rendering of access logs for the prompt."""
    rows = [
        {
            "timestamp": log.timestamp.isoformat(),
            "type": log.type.value,
            "plate": log.vehicle_plate,
            "registered": log.is_registered,
            "spot": log.spot_id,
            "notes": log.notes,
        }
        for log in logs
    ]
    return json.dumps(rows, ensure_ascii=False)


class Assistant:
    """Chat-completions client wrapper with canned fallbacks."""

    def __init__(
        self,
        client: Optional[Any] = None,
        model: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize assistant.

        Args:
            client: Object with the ``chat.completions.create`` interface. If
                None, an ``openai.OpenAI`` client is built from OPENAI_API_KEY
                and OPENAI_BASE_URL, or no client at all when the key is unset
            model: Model name. If None, checks CONDOGEST_ASSISTANT_MODEL, then
                defaults to gpt-4o-mini
            environ: Environment to read settings from (defaults to os.environ)
        """
        environ = os.environ if environ is None else environ
        self.model = model or environ.get(MODEL_VAR) or DEFAULT_MODEL
        if client is None and environ.get(API_KEY_VAR):
            client = OpenAI(
                api_key=environ[API_KEY_VAR],
                base_url=environ.get(BASE_URL_VAR) or None,
            )
        self.client = client

    @property
    def configured(self) -> bool:
        return self.client is not None

    def _complete(self, prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        return (response.choices[0].message.content or "").strip()

    def draft_package_notification(self, recipient: str, item: str, location: str) -> str:
        """Draft the message telling a resident a package arrived."""
        if not self.configured:
            logger.info("assistant_unconfigured", task="package_notification")
            return unconfigured_notification(recipient, item, location)

        prompt = NOTIFICATION_PROMPT.format(recipient=recipient, item=item, location=location)
        try:
            return self._complete(prompt) or EMPTY_NOTIFICATION
        except REQUEST_ERRORS as exc:
            logger.warning("assistant_request_failed", task="package_notification", error=str(exc))
            return failed_notification(recipient, item, location)

    def analyze_access_logs(self, logs: list[AccessLog]) -> str:
        """Summarise anomalies and peaks in the most recent gate logs."""
        if not self.configured:
            logger.info("assistant_unconfigured", task="access_log_analysis")
            return UNCONFIGURED_ANALYSIS

        prompt = ANALYSIS_PROMPT.format(logs=logs_to_json(logs[:ANALYSIS_LOG_LIMIT]))
        try:
            return self._complete(prompt) or EMPTY_ANALYSIS
        except REQUEST_ERRORS as exc:
            logger.warning("assistant_request_failed", task="access_log_analysis", error=str(exc))
            return FAILED_ANALYSIS
