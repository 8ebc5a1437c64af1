"""
One article, end to end: extract, enrich, store, analyze, store.

Strategy and analysis failures are absorbed below this layer. Anything that
escapes ``ArticlePipeline.process`` is an outer failure for the caller.
"""

from typing import Callable, Optional

import httpx
from sqlalchemy.orm import Session

from services.extractor import cleaner, crud
from services.extractor.analysis import AnalysisGenerator
from services.extractor.enricher import ContextEnricher
from services.extractor.metrics import ARTICLES_PROCESSED
from services.extractor.orchestrator import (ExtractionOrchestrator,
                                             PreExtracted)
from shared.app_logging.logger import CorrelationContext, get_logger
from shared.config.settings import Settings
from shared.database.models.article import ArticleStatus
from shared.database.session import SessionLocal
from shared.schemas.messages import ExtractRequest

logger = get_logger("extractor.pipeline")


class ArticlePipeline:
    def __init__(
        self,
        settings: Settings,
        orchestrator: Optional[ExtractionOrchestrator] = None,
        enricher: Optional[ContextEnricher] = None,
        generator: Optional[AnalysisGenerator] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.orchestrator = orchestrator or ExtractionOrchestrator(settings, transport=transport)
        self.enricher = enricher or ContextEnricher(settings.search, transport=transport)
        self.generator = generator or AnalysisGenerator(settings)
        self.session_factory = session_factory

    def _update(self, request: ExtractRequest, **fields) -> None:
        crud.update_article(request.article_id, session_factory=self.session_factory, **fields)

    async def process(self, request: ExtractRequest) -> None:
        with CorrelationContext(str(request.article_id)):
            logger.info(f"Processing article {request.article_id}: {request.url}")
            self._update(request, status=ArticleStatus.EXTRACTING.value)

            pre = None
            if request.pre_extracted:
                pre = PreExtracted(
                    content=request.content,
                    title=request.title,
                    image_url=request.image_url,
                    author=request.author,
                )
            outcome = await self.orchestrator.extract(request.url, pre_extracted=pre)
            extracted = outcome.content
            logger.info(f"Extracted via {outcome.strategy or 'terminal fallback'} ({len(extracted.content)} chars)")

            related = await self.enricher.search(extracted.title)

            images = [{"url": image.src, "alt": image.alt} for image in extracted.images]
            self._update(
                request,
                title=cleaner.clean_title(extracted.title, request.url),
                description=extracted.description,
                content=extracted.content,
                image_url=extracted.images[0].src if extracted.images else None,
                site_name=extracted.site_name,
                author=extracted.author,
                images=images,
                # Comment extraction for discussion sites is not implemented.
                comments=[],
                status=ArticleStatus.ANALYZING.value,
            )

            analysis = await self.generator.generate(extracted, outcome.source, related)
            self._update(
                request,
                analysis=analysis.model_dump(),
                status=ArticleStatus.READY.value,
            )
            ARTICLES_PROCESSED.labels(status=ArticleStatus.READY.value).inc()
            logger.info(f"Article {request.article_id} processed successfully")

    def mark_failed(self, request: ExtractRequest, error: Exception) -> bool:
        ARTICLES_PROCESSED.labels(status=ArticleStatus.FAILED.value).inc()
        return crud.mark_failed(request.article_id, str(error), session_factory=self.session_factory)
