"""Message and conversation models"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Message role types"""
    USER = "user"
    ASSISTANT = "assistant"
    ERROR = "error"


class Message(BaseModel):
    """Individual chat message"""
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: Optional[Dict[str, Any]] = Field(default=None)

    @property
    def is_error(self) -> bool:
        return self.role == MessageRole.ERROR


class Conversation(BaseModel):
    """In-memory chat transcript capped at ``max_length`` messages"""
    max_length: int = Field(default=50, gt=0, description="Messages kept in memory")
    messages: List[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def add_message(self, role: MessageRole, content: str, metadata: Optional[Dict[str, Any]] = None) -> Message:
        """Add a new message, dropping the oldest beyond the cap"""
        message = Message(role=role, content=content, metadata=metadata)
        self.messages.append(message)
        if len(self.messages) > self.max_length:
            del self.messages[: len(self.messages) - self.max_length]
        self.updated_at = datetime.now()
        return message

    def clear(self) -> None:
        self.messages.clear()
        self.updated_at = datetime.now()
