# ABOUTME: AI text analysis orchestration
# ABOUTME: Builds the prompt, calls the chat completions endpoint, and parses the reply with a degraded fallback

import json
import logging
import re
from typing import Any, Optional

import httpx

from docgateway.config import Settings, get_settings
from docgateway.utils.validators import count_words, reading_time_minutes

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Analyze the document and return JSON with: summary, keywords (array), "
    "sentiment (positive/negative/neutral), sentimentScore (-1 to 1), "
    "keyTopics (array). Only return valid JSON."
)

SENTIMENTS = ("positive", "negative", "neutral")
FALLBACK_SUMMARY_LENGTH = 500
UPSTREAM_LOG_BODY_LENGTH = 1000

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class AnalysisError(Exception):
    """Analysis could not be produced; carries the status to return to the caller."""

    def __init__(self, status_code: int, message: str, code: str = "AI_FAILURE"):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code


def build_messages(content: str, max_chars: int) -> list[dict]:
    """Chat messages for the model. Only the first max_chars of content are sent."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"Analyze: {content[:max_chars]}"},
    ]


def fallback_analysis(raw_reply: str) -> dict:
    """Degraded result used when the model reply is not parseable JSON."""
    return {
        "summary": raw_reply[:FALLBACK_SUMMARY_LENGTH],
        "keywords": [],
        "sentiment": "neutral",
        "sentimentScore": 0,
        "keyTopics": [],
    }


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _score(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(-1.0, min(1.0, float(value)))


def normalize_analysis(data: dict, raw_reply: str) -> dict:
    """Coerce a parsed model reply into the documented field shapes."""
    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        summary = raw_reply[:FALLBACK_SUMMARY_LENGTH]

    sentiment = data.get("sentiment")
    if isinstance(sentiment, str):
        sentiment = sentiment.strip().lower()
    if sentiment not in SENTIMENTS:
        sentiment = "neutral"

    return {
        "summary": summary,
        "keywords": _string_list(data.get("keywords")),
        "sentiment": sentiment,
        "sentimentScore": _score(data.get("sentimentScore")),
        "keyTopics": _string_list(data.get("keyTopics")),
    }


def parse_analysis_reply(raw_reply: str) -> dict:
    """
    Parse the model's reply into an analysis dict.

    The reply may be wrapped in a ```json fenced block. Anything that still
    fails to parse as a JSON object falls back to fallback_analysis().
    """
    json_str = raw_reply
    match = _FENCED_BLOCK.search(raw_reply)
    if match:
        json_str = match.group(1)

    try:
        data = json.loads(json_str.strip())
    except ValueError:
        logger.warning("AI reply was not valid JSON, using fallback analysis")
        return fallback_analysis(raw_reply)

    if not isinstance(data, dict):
        logger.warning("AI reply was not a JSON object, using fallback analysis")
        return fallback_analysis(raw_reply)

    return normalize_analysis(data, raw_reply)


def _extract_reply_content(payload: Any) -> Optional[str]:
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


class DocumentAnalyzer:
    """
    Client for the AI chat completions endpoint.

    A custom httpx transport can be supplied for testing; otherwise the
    default network transport is used.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    async def _complete(self, content: str) -> str:
        settings = self.settings
        request_body = {
            "model": settings.ai_model,
            "messages": build_messages(content, settings.ai_max_content_chars),
        }
        headers = {
            "Authorization": f"Bearer {settings.ai_api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=settings.ai_timeout_seconds, transport=self.transport) as client:
                response = await client.post(settings.ai_gateway_url, json=request_body, headers=headers)
        except httpx.TimeoutException:
            logger.error("AI request timed out", extra={"timeout_seconds": settings.ai_timeout_seconds})
            raise AnalysisError(500, "AI analysis failed")
        except httpx.HTTPError as e:
            logger.error("AI request failed: %s", e)
            raise AnalysisError(500, "AI analysis failed")

        if response.status_code == 429:
            raise AnalysisError(429, "Rate limit exceeded. Please try again later.", code="AI_RATE_LIMITED")
        if response.status_code == 402:
            raise AnalysisError(402, "AI credits exhausted. Please add credits.", code="AI_CREDITS_EXHAUSTED")
        if not response.is_success:
            logger.error(
                "AI API error",
                extra={
                    "upstream_status": response.status_code,
                    "upstream_body": response.text[:UPSTREAM_LOG_BODY_LENGTH],
                },
            )
            raise AnalysisError(500, "AI analysis failed")

        try:
            payload = response.json()
        except ValueError:
            logger.error("AI response body was not JSON", extra={"upstream_body": response.text[:UPSTREAM_LOG_BODY_LENGTH]})
            raise AnalysisError(500, "AI analysis failed")

        reply = _extract_reply_content(payload)
        if not reply or not reply.strip():
            logger.error("No content in AI response")
            raise AnalysisError(500, "AI returned empty response")

        return reply

    async def analyze(self, content: str, title: str) -> dict:
        """
        Analyze sanitized text.

        Word count and reading time are computed locally; the model supplies
        summary, keywords, sentiment, sentimentScore and keyTopics.

        Raises:
            AnalysisError: AI not configured, upstream failure, or empty reply
        """
        if not self.settings.ai_api_key:
            logger.error("AI API key not configured")
            raise AnalysisError(500, "AI service not configured")

        word_count = count_words(content)
        reply = await self._complete(content)
        analysis = parse_analysis_reply(reply)

        return {
            "title": title,
            "wordCount": word_count,
            "readingTimeMinutes": reading_time_minutes(word_count),
            **analysis,
        }


def get_analyzer() -> DocumentAnalyzer:
    """Dependency providing the AI analyzer."""
    return DocumentAnalyzer(get_settings())
