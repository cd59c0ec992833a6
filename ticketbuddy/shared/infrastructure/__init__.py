"""
Infrastructure Layer
=====================

Low-level technical concerns shared by every module:
- JSON logging setup
- Latency timing
"""
