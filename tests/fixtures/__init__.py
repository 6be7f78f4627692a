"""
Record factories for calculator and store tests.

Timestamps are fixed and increase with ``seq`` so ordering is deterministic.
"""

from .records import client_feedback, employee_update, risk

__all__ = ["client_feedback", "employee_update", "risk"]
