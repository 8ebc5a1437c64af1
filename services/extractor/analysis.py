"""
Analysis generation for extracted articles.

``AnalysisGenerator.generate`` always returns an ``Analysis``: either the
completion service's answer or a locally synthesized fallback, both passed
through ``validate_analysis``.
"""

import math
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from services.extractor import cleaner
from services.extractor.metrics import ANALYSES
from services.extractor.orchestrator import (TERMINAL_COPY, X_FAILED_CONTENT,
                                             X_NOT_CONFIGURED, Platform,
                                             SourceURL)
from shared.app_logging.logger import get_logger, log_error_with_context
from shared.config.settings import Settings
from shared.schemas.messages import Analysis, ExtractedContent, RelatedResult
from shared.utils import template_engine
from shared.utils.completion import CompletionClient
from shared.utils.json_extract import extract_json_from_response

logger = get_logger("extractor.analysis")

SENTIMENTS = ("positive", "negative", "neutral", "mixed")
MAX_KEY_POINTS = 3
MAX_TOPICS = 5
MAX_DETAILED_POINTS = 10
MAX_RELATED = 3

# Exact texts of the synthesized terminal records.
PLACEHOLDER_TEXTS = frozenset(
    [copy.content for copy in TERMINAL_COPY.values()] + [X_NOT_CONFIGURED.content, X_FAILED_CONTENT]
)

RESTRICTED_MESSAGES: Dict[Platform, Tuple[str, str]] = {
    Platform.LINKEDIN: (
        "LinkedIn post saved - open in browser to view",
        "LinkedIn requires login to view full content",
    ),
    Platform.X: (
        "X post saved - open in browser to view",
        "X/Twitter requires login to view full content",
    ),
    Platform.PAYWALLED: (
        "Paywalled article saved - subscription required",
        "This publication requires a subscription",
    ),
}

_SENTENCE_BREAK = re.compile(r"[.!?]\s")


def is_placeholder_content(content: ExtractedContent) -> bool:
    """True for synthesized terminal records rather than real article text."""
    if content.is_fallback:
        return True
    return (content.content or "").strip() in PLACEHOLDER_TEXTS


def _clean_strings(items: Any, limit: int) -> List[str]:
    if not isinstance(items, list):
        return []
    cleaned = [cleaner.strip_emojis(item) for item in items if isinstance(item, str) and item]
    return [item for item in cleaned if item][:limit]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return cleaner.strip_emojis(value)
    return None


def validate_analysis(raw: Any, content_length: int) -> Analysis:
    """Normalize an untrusted analysis payload into a valid ``Analysis``.

    Lists are filtered and capped, never padded; only an empty key-point
    list gets a synthesized bullet. Never raises on malformed input.
    """
    if not isinstance(raw, dict):
        raw = {}

    summary = raw.get("summary")
    tldr = raw.get("tldr") if isinstance(raw.get("tldr"), str) else None

    key_points = _clean_strings(raw.get("key_points"), MAX_KEY_POINTS)
    if not key_points:
        if tldr:
            bullet = tldr
        elif isinstance(summary, str) and len(summary) > 20:
            bullet = summary[:150] + ("..." if len(summary) > 150 else "")
        else:
            bullet = "See full article for details"
        key_points = [cleaner.strip_emojis(bullet) or "See full article for details"]

    topics = [t for t in (raw.get("topics") or []) if isinstance(t, str) and t] if isinstance(raw.get("topics"), list) else []
    topics = topics[:MAX_TOPICS] or ["general"]

    sentiment = raw.get("sentiment") if raw.get("sentiment") in SENTIMENTS else "neutral"

    reading_time = raw.get("reading_time_minutes")
    if _is_number(reading_time) and math.isfinite(reading_time):
        reading_time = max(1, math.ceil(reading_time))
    else:
        reading_time = max(1, math.ceil(content_length / 5 / 200))

    summary_text = cleaner.strip_emojis(summary) if isinstance(summary, str) and len(summary) > 10 else ""

    content_type = raw.get("content_type")
    return Analysis(
        summary=summary_text or "Summary unavailable",
        tldr=_optional_text(tldr),
        key_points=key_points,
        detailed_points=_clean_strings(raw.get("detailed_points"), MAX_DETAILED_POINTS),
        topics=topics,
        sentiment=sentiment,
        reading_time_minutes=reading_time,
        content_type=content_type if isinstance(content_type, str) and content_type else "article",
        comments_summary=_optional_text(raw.get("comments_summary")),
        broader_context=_optional_text(raw.get("broader_context")),
        related_sources=raw.get("related_sources") if isinstance(raw.get("related_sources"), list) else [],
    )


def build_fallback_analysis(content: ExtractedContent, source: SourceURL, reason: str) -> Analysis:
    """Local analysis used when the completion call failed or was skipped.

    ``reason`` is ``"error"`` after a failed call and anything else for a skip.
    """
    text = content.content or ""
    description = content.description or ""

    if reason == "error":
        summary = description if len(description) > 20 else f"Article from {content.site_name or source.host}"
        preview = _SENTENCE_BREAK.split(text[:300])[0]
        key_points = [preview.strip() + "."] if len(preview) > 30 else [summary]
    else:
        summary = description or text[:200] or "Content could not be analyzed"
        key_points: List[str] = []
        if is_placeholder_content(content):
            if source.platform in RESTRICTED_MESSAGES:
                summary, point = RESTRICTED_MESSAGES[source.platform]
                key_points = [point]
        elif len(text) > 10:
            key_points = [text[:250] + ("..." if len(text) > 250 else "")]
        else:
            key_points = [summary]

    raw = {
        "summary": summary,
        "key_points": key_points,
        "topics": [],
        "sentiment": "neutral",
        "reading_time_minutes": max(1, math.ceil(len(text) / 1500)),
    }
    return validate_analysis(raw, len(text))


class AnalysisGenerator:
    def __init__(self, settings: Settings, completion: Optional[CompletionClient] = None):
        self.settings = settings
        self.completion = completion or CompletionClient(settings.completion)

    def skip_reason(self, content: ExtractedContent) -> Optional[str]:
        """Why the completion call should not be made, or ``None`` to make it."""
        if not self.completion.configured:
            return "completion service not configured"
        if len(content.content or "") <= self.settings.extraction.analysis_min_length:
            return "content too short"
        if is_placeholder_content(content):
            return "placeholder content"
        return None

    def build_prompt(self, title: str, content: str, related: Sequence[RelatedResult] = ()) -> str:
        cleaned = cleaner.clean(content)[: self.settings.extraction.max_prompt_chars]
        return template_engine.render(
            "analysis_prompt.j2",
            title=title,
            content=cleaned,
            related=[r.model_dump() for r in list(related)[:MAX_RELATED]],
        )

    async def analyze(self, title: str, content: str, related: Sequence[RelatedResult] = ()) -> Analysis:
        """Ask the completion service for an analysis. Raises on any failure."""
        prompt = self.build_prompt(title, content, related)
        logger.info(f"Requesting analysis, content length {len(content)}, title {title[:50]!r}")
        text = await self.completion.complete(prompt)
        logger.debug(f"Raw completion (first 1000 chars): {text[:1000]}")
        analysis = validate_analysis(extract_json_from_response(text), len(content))
        logger.info(f"Analysis validated with {len(analysis.key_points)} key points")
        return analysis

    async def generate(
        self, content: ExtractedContent, source: SourceURL, related: Sequence[RelatedResult] = ()
    ) -> Analysis:
        reason = self.skip_reason(content)
        if reason:
            logger.info(f"Skipping analysis: {reason}")
            ANALYSES.labels(path="skipped").inc()
            return build_fallback_analysis(content, source, reason="skipped")

        try:
            analysis = await self.analyze(content.title, content.content, related)
        except Exception as e:
            log_error_with_context(logger, e, {"url": source.url, "stage": "analysis"})
            ANALYSES.labels(path="fallback").inc()
            return build_fallback_analysis(content, source, reason="error")

        ANALYSES.labels(path="completion").inc()
        return analysis
