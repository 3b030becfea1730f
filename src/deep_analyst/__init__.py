"""
Deep Analyst package.

Grounded research reports from Gemini with Google Search, rendered from
Markdown and kept in a local report history.
"""

from .gemini_service import perform_deep_research
from .markdown import format_markdown
from .state import ResearchSession

__all__ = ["perform_deep_research", "format_markdown", "ResearchSession"]
