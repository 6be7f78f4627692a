"""
Security module for Project Pulse.

Exports:
    KeyManager: API key management bound to dashboard users
    KeyInfo: Metadata about an API key
"""

from pulse.security.key_manager import KeyInfo, KeyManager

__all__ = [
    "KeyManager",
    "KeyInfo",
]
