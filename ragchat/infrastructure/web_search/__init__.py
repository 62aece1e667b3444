"""Web search implementations."""
from .tavily_client import TavilySearchClient

__all__ = ["TavilySearchClient"]
