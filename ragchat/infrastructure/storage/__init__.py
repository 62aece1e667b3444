"""Conversation store implementations."""
from .memory_store import InMemoryConversationStore
from .sql_store import SqlConversationStore

__all__ = ["InMemoryConversationStore", "SqlConversationStore"]
