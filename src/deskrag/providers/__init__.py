"""
Model service providers.
"""

from deskrag.providers.base import ChatProvider
from deskrag.providers.ollama import OllamaProvider

__all__ = [
    "ChatProvider",
    "OllamaProvider",
]
