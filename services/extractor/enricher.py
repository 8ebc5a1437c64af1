from typing import List, Optional

import httpx

from shared.app_logging.logger import get_logger
from shared.config.settings import SearchSettings
from shared.schemas.messages import RelatedResult

logger = get_logger("extractor.enricher")

MIN_TITLE_LENGTH = 5


class ContextEnricher:
    """Best-effort lookup of related coverage for an article title."""

    def __init__(self, settings: SearchSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    async def search(self, query: str) -> List[RelatedResult]:
        if not self.settings.api_key:
            logger.debug("Search key not configured, skipping related context")
            return []
        if not query or len(query) <= MIN_TITLE_LENGTH:
            return []

        body = {
            "api_key": self.settings.api_key,
            "query": query[: self.settings.max_query_length],
            "search_depth": "basic",
            "include_answer": False,
            "include_raw_content": False,
            "max_results": self.settings.max_results,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                response = await client.post(self.settings.endpoint, json=body)
                response.raise_for_status()
                data = response.json()
            results = [
                RelatedResult(
                    title=item.get("title") or "",
                    url=item.get("url") or "",
                    content=item.get("content") or "",
                    score=item.get("score") or 0.0,
                )
                for item in (data.get("results") or [])[: self.settings.max_results]
            ]
        except Exception as e:
            logger.warning(f"Related search failed: {e}")
            return []

        logger.info(f"Found {len(results)} related articles")
        return results
