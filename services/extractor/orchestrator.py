"""
Extraction orchestration.

A URL is classified once, then the strategies listed for its routing class
are attempted in order, each at most once. A result that looks like a login
wall is rejected just like a raised error. When every attempt fails a
platform-aware terminal record is synthesized, so ``extract`` never raises
for strategy failures.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import httpx

from services.extractor.cleaner import hostname
from services.extractor.metrics import STRATEGY_ATTEMPTS
from services.extractor.strategies import (ExtractionStrategy, StrategyName,
                                           build_strategies)
from shared.app_logging.logger import get_logger
from shared.config.settings import Settings
from shared.schemas.messages import ExtractedContent, ImageRef
from shared.utils.errors import ConfigurationError, ContentTooShortError

logger = get_logger("extractor.orchestrator")


class Platform(str, Enum):
    X = "x"
    LINKEDIN = "linkedin"
    PAYWALLED = "paywalled"
    GENERIC = "generic"


class RoutingClass(str, Enum):
    SOCIAL_RESTRICTED = "social_restricted"
    READER_FIRST = "reader_first"
    DEFAULT = "default"


PLATFORM_DOMAINS: Dict[Platform, Tuple[str, ...]] = {
    Platform.X: ("x.com", "twitter.com"),
    Platform.LINKEDIN: ("linkedin.com",),
    Platform.PAYWALLED: ("wsj.com", "nytimes.com", "ft.com"),
}
DISCUSSION_DOMAINS = ("reddit.com", "news.ycombinator.com", "x.com", "twitter.com")


def host_matches(host: str, domains: Iterable[str]) -> bool:
    """True when ``host`` is one of ``domains`` or a subdomain of one."""
    return any(host == domain or host.endswith("." + domain) for domain in domains)


@dataclass(frozen=True)
class SourceURL:
    url: str
    host: str
    platform: Platform
    routing: RoutingClass
    is_discussion: bool = False


def classify_url(url: str, reader_first_sites: Iterable[str] = ()) -> SourceURL:
    host = hostname(url).lower()

    platform = Platform.GENERIC
    for candidate, domains in PLATFORM_DOMAINS.items():
        if host_matches(host, domains):
            platform = candidate
            break

    if platform is Platform.X:
        routing = RoutingClass.SOCIAL_RESTRICTED
    elif host_matches(host, reader_first_sites):
        routing = RoutingClass.READER_FIRST
    else:
        routing = RoutingClass.DEFAULT

    return SourceURL(
        url=url,
        host=host,
        platform=platform,
        routing=routing,
        is_discussion=host_matches(host, DISCUSSION_DOMAINS),
    )


@dataclass(frozen=True)
class LoginWallRule:
    """A platform's signature of a login wall served in place of content."""

    phrases: Tuple[str, ...]
    min_length: int

    def matches(self, text: str, check_phrases: bool = True) -> bool:
        if len(text or "") < self.min_length:
            return True
        return check_phrases and any(phrase in text for phrase in self.phrases)


LOGIN_WALL_RULES: Dict[Platform, LoginWallRule] = {
    Platform.X: LoginWallRule(phrases=("Sign in", "Log in", "Something went wrong"), min_length=100),
    Platform.LINKEDIN: LoginWallRule(phrases=("Sign in", "Join now"), min_length=200),
}

STRATEGY_ORDER: Dict[RoutingClass, Tuple[StrategyName, ...]] = {
    RoutingClass.SOCIAL_RESTRICTED: (StrategyName.AI_SEARCH,),
    RoutingClass.READER_FIRST: (StrategyName.READER_PROXY, StrategyName.READABILITY, StrategyName.BASIC),
    RoutingClass.DEFAULT: (StrategyName.READABILITY, StrategyName.READER_PROXY, StrategyName.BASIC),
}


@dataclass(frozen=True)
class TerminalCopy:
    title: Optional[str]
    description: str
    content: str


TERMINAL_COPY: Dict[Platform, TerminalCopy] = {
    Platform.LINKEDIN: TerminalCopy(
        title="LinkedIn Post",
        description="LinkedIn content requires login to view",
        content=(
            "This LinkedIn post cannot be extracted automatically. LinkedIn requires "
            "authentication to view full content. Tap to open in browser."
        ),
    ),
    Platform.X: TerminalCopy(
        title="X Post",
        description="X/Twitter content requires login to view",
        content=(
            "This post cannot be extracted automatically. X/Twitter requires "
            "authentication to view full content. Tap to open in browser."
        ),
    ),
    Platform.PAYWALLED: TerminalCopy(
        title="Paywalled Article",
        description="This article is behind a paywall",
        content="This article requires a subscription to read. Tap to open in browser.",
    ),
    Platform.GENERIC: TerminalCopy(
        title=None,
        description="",
        content="Content could not be extracted. Tap to open the original article.",
    ),
}

X_NOT_CONFIGURED = TerminalCopy(
    title="X Post",
    description="X API key not configured",
    content="X post extraction is not configured. Tap to open in browser.",
)
X_FAILED_CONTENT = "This X post could not be extracted. Tap to open in browser."


@dataclass
class PreExtracted:
    """Content captured by an authenticated client before the request."""

    content: Optional[str] = None
    title: Optional[str] = None
    image_url: Optional[str] = None
    author: Optional[str] = None


@dataclass
class ExtractionOutcome:
    content: ExtractedContent
    source: SourceURL
    strategy: Optional[str] = None
    attempts: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.content.is_fallback


def terminal_record(source: SourceURL, copy: Optional[TerminalCopy] = None, site_name: Optional[str] = None) -> ExtractedContent:
    copy = copy or TERMINAL_COPY[source.platform]
    return ExtractedContent(
        title=copy.title or source.host,
        description=copy.description,
        content=copy.content,
        images=[],
        site_name=site_name or source.host,
        is_fallback=True,
    )


class ExtractionOrchestrator:
    def __init__(
        self,
        settings: Settings,
        strategies: Optional[Mapping[StrategyName, ExtractionStrategy]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.strategies = strategies if strategies is not None else build_strategies(settings, transport)

    def classify(self, url: str) -> SourceURL:
        return classify_url(url, self.settings.extraction.reader_first_sites)

    async def extract(self, url: str, pre_extracted: Optional[PreExtracted] = None) -> ExtractionOutcome:
        source = self.classify(url)
        logger.info(f"Classified {source.host} as {source.platform.value}/{source.routing.value}")

        if source.routing is RoutingClass.SOCIAL_RESTRICTED:
            return await self._extract_restricted(source)

        min_pre = self.settings.extraction.pre_extracted_min_length
        if pre_extracted and pre_extracted.content and len(pre_extracted.content) > min_pre:
            logger.info(f"Using pre-extracted content ({len(pre_extracted.content)} chars)")
            return ExtractionOutcome(content=self._wrap_pre_extracted(source, pre_extracted), source=source)

        attempts: List[Tuple[str, str]] = []
        for index, name in enumerate(STRATEGY_ORDER[source.routing]):
            try:
                content = await self._attempt(name, source, strict=index == 0)
            except Exception as e:
                logger.warning(f"{name.value} failed for {url}: {e}")
                attempts.append((name.value, str(e)))
                continue
            attempts.append((name.value, "ok"))
            return ExtractionOutcome(content=content, source=source, strategy=name.value, attempts=attempts)

        logger.error(f"All extraction strategies failed for {url}")
        return ExtractionOutcome(content=terminal_record(source), source=source, attempts=attempts)

    async def _extract_restricted(self, source: SourceURL) -> ExtractionOutcome:
        name = StrategyName.AI_SEARCH
        try:
            content = await self._attempt(name, source, strict=True)
        except ConfigurationError as e:
            logger.error(f"AI search unavailable: {e}")
            return ExtractionOutcome(
                content=terminal_record(source, X_NOT_CONFIGURED, site_name="X"),
                source=source,
                attempts=[(name.value, str(e))],
            )
        except Exception as e:
            logger.error(f"AI search extraction failed: {e}")
            failed = TerminalCopy(
                title="X Post",
                description=f"Extraction failed: {str(e) or 'Unknown error'}",
                content=X_FAILED_CONTENT,
            )
            return ExtractionOutcome(
                content=terminal_record(source, failed, site_name="X"),
                source=source,
                attempts=[(name.value, str(e))],
            )
        return ExtractionOutcome(content=content, source=source, strategy=name.value, attempts=[(name.value, "ok")])

    async def _attempt(self, name: StrategyName, source: SourceURL, strict: bool) -> ExtractedContent:
        """Run one strategy. ``strict`` also checks login-wall phrases, not just length."""
        strategy = self.strategies[name]
        try:
            content = await strategy.attempt(source.url)
        except Exception:
            STRATEGY_ATTEMPTS.labels(strategy=name.value, outcome="error").inc()
            raise

        rule = LOGIN_WALL_RULES.get(source.platform)
        if rule and rule.matches(content.content, check_phrases=strict):
            STRATEGY_ATTEMPTS.labels(strategy=name.value, outcome="soft_fail").inc()
            raise ContentTooShortError(f"{source.platform.value} returned a login wall")

        STRATEGY_ATTEMPTS.labels(strategy=name.value, outcome="ok").inc()
        return content

    def _wrap_pre_extracted(self, source: SourceURL, pre: PreExtracted) -> ExtractedContent:
        return ExtractedContent(
            title=pre.title or source.host,
            description=pre.content[:200],
            content=pre.content,
            images=[ImageRef(src=pre.image_url)] if pre.image_url else [],
            author=pre.author,
            site_name=source.host,
        )
