"""
Incidents Domain Entities
=========================

Pure Python domain objects for the checkout diagnostic.

The diagnostic reads a log sample, asks the model for an SRE summary and files
an incident. The filed values are fixed; the model reply is only logged.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from ticketbuddy.config import Severity

CHECKOUT_TOOL = "summarize_checkout_health"

UI_OBSERVATION = (
    "UI check: The Pay button is disabled after card entry, "
    "so users cannot complete checkout."
)

DEFAULT_CHECKOUT_LOGS: Dict[str, Any] = {
    "service": "checkout",
    "errors": [
        {
            "msg": "TypeError: Cannot read property 'billing_address' of undefined",
            "count": 187,
            "route": "/api/pay",
            "commit": "a12f9c"
        },
        {
            "msg": "Payment gateway timeout",
            "count": 52,
            "route": "/api/pay",
            "commit": "a12f9c"
        }
    ]
}


@dataclass(frozen=True)
class DiagnosticReport:
    """Summary, severity and fix recorded on an incident."""

    summary: str
    severity: str
    recommended_fix: str

    def __post_init__(self):
        if self.severity not in (Severity.HIGH, Severity.MEDIUM, Severity.LOW):
            raise ValueError(f"severity must be high, medium or low, got {self.severity!r}")


CHECKOUT_REPORT = DiagnosticReport(
    summary="Checkout failing for ~30% of card payments after deploy a12f9c.",
    severity=Severity.HIGH,
    recommended_fix="Rollback payment_handler.js or add null guard around billing_address."
)


def load_log_sample(path: Path) -> Any:
    """
    Load the log sample from a YAML or JSON file.

    YAML is a superset of JSON, so one loader covers both. Falls back to the
    built-in sample when the file is missing or empty.
    """
    if not path.exists():
        return DEFAULT_CHECKOUT_LOGS

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    return data if data else DEFAULT_CHECKOUT_LOGS


class DiagnosticPromptBuilder:
    """Builds the SRE summarisation prompt."""

    PROMPT_TEMPLATE = (
        "You are an SRE assistant. Analyze these logs. Output JSON with keys: "
        "summary, severity (high|medium|low), recommendedFix. Here are the logs: {logs}"
    )

    @classmethod
    def build_prompt(cls, logs: Any) -> str:
        return cls.PROMPT_TEMPLATE.format(logs=json.dumps(logs, default=str))
