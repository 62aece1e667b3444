"""LLM protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for LLM client."""

    async def invoke(self, messages: list[dict]) -> str:
        """Generate a reply for an ordered list of role-tagged messages.

        Args:
            messages: ``[{"role": ..., "content": ...}]``, system message first.

        Returns:
            Generated text.
        """
        ...
