"""
Gemini research client.

The client:
- Sends a user query to Gemini with Google Search grounding enabled.
- Extracts the generated Markdown report.
- Collects and deduplicates the grounding sources.
- Normalises rate-limit / quota failures into a single error.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .config import Settings, settings as default_settings
from .errors import ConfigurationError, GeminiAPIError, RateLimitError
from .models import GroundingSource, ResearchReport

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = """
You are a professional research analyst. Use the Google Search tool to give the
user a "deep search report" that digs into their question from several angles
instead of a surface-level answer.

Guidelines:
1. Search: whenever the answer depends on recent information or needs fact
   checking, use Google Search.
2. Verify: gather information from several sources and point out any
   contradictions between them.
3. Structure the report in Markdown with these sections:
   * **Executive Summary**: the conclusion in brief.
   * **Key Findings**: the main facts found while searching (bullet points).
   * **Detailed Analysis**: background, technical details, market trends or
     historical context.
   * **Sources**: the references used (bullet points with name and link).

Style:
* Keep a logical, objective tone.
* Add a short explanation next to technical terms.
* Where information is unknown or hard to predict, say plainly that there is
  insufficient data.
* When data needs comparing, organise it as a Markdown table.
* Answer in the language of the user's question.
"""

EMPTY_REPORT = "No report generated."


def dedupe_sources(sources: Iterable[GroundingSource]) -> List[GroundingSource]:
    """Keep the first source seen for each URI, preserving order."""
    seen = set()
    unique: List[GroundingSource] = []
    for source in sources:
        if source.uri in seen:
            continue
        seen.add(source.uri)
        unique.append(source)
    return unique


def is_rate_limit_error(exc: BaseException) -> bool:
    message = str(exc)
    return "429" in message or "quota" in message.lower()


class GeminiResearchClient:
    """
    Thin wrapper around the Gemini ``generateContent`` endpoint.

    One request per query: no retry, no streaming, no cancellation.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings or default_settings
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self._settings.gemini_base_url}/models/{self._settings.gemini_model}:generateContent"

    def _build_payload(self, query: str) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": query}]}],
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "tools": [{"google_search": {}}],
            "generationConfig": {"temperature": self._settings.temperature},
        }

    async def research(self, query: str) -> ResearchReport:
        api_key = self._settings.get_api_key()
        if not api_key:
            raise ConfigurationError(
                f"API Key is missing. Please ensure {self._settings.api_key_env} is configured."
            )

        try:
            data = await self._generate(query, api_key)
            content = self._extract_text(data) or EMPTY_REPORT
            sources = dedupe_sources(self._extract_sources(data))
            logger.info("Report generated for %r with %d sources.", query, len(sources))
            return ResearchReport(query=query, content=content, sources=sources)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Gemini API Error: %s", exc)
            if is_rate_limit_error(exc):
                raise RateLimitError() from exc
            raise

    async def _generate(self, query: str, api_key: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            timeout=self._settings.request_timeout, transport=self._transport
        ) as client:
            resp = await client.post(
                self.endpoint,
                json=self._build_payload(query),
                headers={"x-goog-api-key": api_key},
            )
        if resp.is_error:
            raise GeminiAPIError(resp.status_code, self._error_message(resp))
        return resp.json()

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            error = resp.json().get("error") or {}
            message = error.get("message")
        except (ValueError, AttributeError):
            message = None
        return message or resp.reason_phrase or resp.text

    @staticmethod
    def _first_candidate(data: Dict[str, Any]) -> Dict[str, Any]:
        candidates = data.get("candidates") or []
        return candidates[0] if candidates else {}

    def _extract_text(self, data: Dict[str, Any]) -> str:
        parts = (self._first_candidate(data).get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if not part.get("thought"))

    def _extract_sources(self, data: Dict[str, Any]) -> List[GroundingSource]:
        metadata = self._first_candidate(data).get("groundingMetadata") or {}
        sources: List[GroundingSource] = []
        for chunk in metadata.get("groundingChunks") or []:
            web = chunk.get("web")
            if not web or not web.get("uri"):
                continue
            sources.append(GroundingSource(uri=web["uri"], title=web.get("title") or web["uri"]))
        return sources


async def perform_deep_research(
    query: str,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ResearchReport:
    """Run a single grounded research query and return the new report."""
    return await GeminiResearchClient(settings=settings, transport=transport).research(query)
