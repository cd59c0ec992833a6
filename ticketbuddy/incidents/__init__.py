"""
Incidents Module
================

Bounded Context for the append-only incident log and the checkout diagnostic
tool that files into it.
"""
