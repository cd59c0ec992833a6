"""
Heuristic Ticket Classification
===============================

Deterministic keyword rules used whenever the language model is unavailable
or its reply does not validate. Always yields at least one draft.
"""

import re
from typing import List

from ticketbuddy.tickets.domain.entities import DomainRule, TicketDraft

URGENT_PATTERN = re.compile(
    r"\b(urgent\w*|critical\w*|emergency|asap|security|secure|breach\w*|vulnerab\w*|"
    r"payment\w*|billing|outage|down|data loss)\b"
)
IMPORTANT_PATTERN = re.compile(
    r"\b(important|soon|core|blocking|blocker|broken|high priority|needed)\b"
)

# Scanned in order; one draft per matching rule.
DOMAIN_RULES: List[DomainRule] = [
    DomainRule(
        key="auth",
        label="Authentication",
        pattern=r"\b(auth\w*|log ?in\w*|logout|log out|sign ?in|sign ?up|signup|password\w*|"
                r"sso|oauth|2fa|mfa|credential\w*|session\w*)\b",
        owner="Alex",
        base_priority=3,
        keywords_hint=["login", "password", "sso"],
    ),
    DomainRule(
        key="database",
        label="Database",
        pattern=r"\b(database\w*|db|sql|postgres\w*|mysql|sqlite|quer(y|ies)|migration\w*|"
                r"schema|index(es)?)\b",
        owner="Dana",
        base_priority=2,
        keywords_hint=["database", "query", "migration"],
    ),
    DomainRule(
        key="api",
        label="API",
        pattern=r"\b(api\w*|endpoint\w*|backend|back-end|server\w*|rest|graphql|webhook\w*|"
                r"timeout\w*|5\d\d)\b",
        owner="Sam",
        base_priority=2,
        keywords_hint=["api", "endpoint", "backend"],
    ),
    DomainRule(
        key="frontend",
        label="Frontend",
        pattern=r"\b(ui|ux|frontend|front-end|button\w*|css|layout\w*|page\w*|display\w*|"
                r"styl\w*|design\w*|colou?r\w*|font\w*|dashboard)\b",
        owner="Jordan",
        base_priority=1,
        keywords_hint=["ui", "button", "layout"],
    ),
    DomainRule(
        key="mobile",
        label="Mobile",
        pattern=r"\b(mobile|ios|android|iphone|ipad|tablet|app store|play store)\b",
        owner="Riley",
        base_priority=2,
        keywords_hint=["mobile", "ios", "android"],
    ),
]

_COMPILED_RULES = [(rule, re.compile(rule.pattern)) for rule in DOMAIN_RULES]
_PUNCTUATION = re.compile(r"[^\w\s-]")


def detect_priority(text: str) -> int:
    """Priority implied by urgency language alone."""
    lowered = text.lower()
    if URGENT_PATTERN.search(lowered):
        return 3
    if IMPORTANT_PATTERN.search(lowered):
        return 2
    return 1


def summarize_title(text: str, max_words: int = 6) -> str:
    """First ``max_words`` words of the text with punctuation stripped."""
    words = _PUNCTUATION.sub(" ", text).split()
    return " ".join(words[:max_words]) or "New request"


def matching_rules(text: str) -> List[DomainRule]:
    lowered = text.lower()
    return [rule for rule, pattern in _COMPILED_RULES if pattern.search(lowered)]


def heuristic_drafts(description: str) -> List[TicketDraft]:
    """
    Classify a description without a model.

    One draft per matched domain, owned by the domain's owner; priority is the
    domain's base priority raised to whatever the urgency language implies.
    With no domain match a single unassigned draft is returned.
    """
    urgency = detect_priority(description)
    summary = summarize_title(description)
    rules = matching_rules(description)

    if not rules:
        return [TicketDraft(
            title=summary,
            description=description,
            priority=urgency,
            assignee=None,
        )]

    return [
        TicketDraft(
            title=f"{rule.label}: {summary}",
            description=description,
            priority=max(rule.base_priority, urgency),
            assignee=rule.owner,
        )
        for rule in rules
    ]
