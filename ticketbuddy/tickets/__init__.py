"""
Tickets Module
==============

Bounded Context for ticket submission, AI-assisted classification and triage.

Responsibilities:
- Split a free-text request into one or more tickets (model, then heuristics)
- List, fetch and partially update tickets
- Provide the ticket repository other modules write through (GitHub merge, auto-tickets)
"""

__version__ = "1.0.0"
