"""
Message types for chat requests.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class Role(str, Enum):
    """Message role in conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A message in the conversation."""
    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        """Create a user message."""
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        """Create an assistant message."""
        return cls(role=Role.ASSISTANT, content=content)

    def to_api_format(self) -> dict[str, Any]:
        """Convert to the chat API wire format."""
        return {"role": self.role.value, "content": self.content}
