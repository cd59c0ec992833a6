"""
Copilot Module
==============

Dashboard chat assistant backed by the hosted language model.
"""
