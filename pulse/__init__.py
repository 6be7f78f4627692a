"""
Project Pulse core library.

Health scoring, check-in/risk ingestion and role-based visibility for the
project-health dashboard. The HTTP surface lives in ``api`` and the
command line in ``cli``.
"""

__version__ = "1.0.0"
