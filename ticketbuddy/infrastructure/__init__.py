"""
Infrastructure Layer
=====================

Process-wide technical adapters shared by every module:
- Database engine and sessions
- Language-model client
"""
