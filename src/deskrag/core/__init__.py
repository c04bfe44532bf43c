"""
Core conversation types.
"""

from deskrag.core.message import Message, Role

__all__ = [
    "Message",
    "Role",
]
