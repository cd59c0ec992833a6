"""
Incidents Domain Layer
======================

Contains:
- DiagnosticReport: the summary/severity/fix filed with an incident
- The built-in checkout log sample and its loader
- DiagnosticPromptBuilder: SRE summarisation prompt
"""

from ticketbuddy.incidents.domain.entities import (
    CHECKOUT_TOOL,
    CHECKOUT_REPORT,
    DEFAULT_CHECKOUT_LOGS,
    UI_OBSERVATION,
    DiagnosticReport,
    DiagnosticPromptBuilder,
    load_log_sample,
)

__all__ = [
    "CHECKOUT_TOOL",
    "CHECKOUT_REPORT",
    "DEFAULT_CHECKOUT_LOGS",
    "UI_OBSERVATION",
    "DiagnosticReport",
    "DiagnosticPromptBuilder",
    "load_log_sample",
]
