"""
Extraction strategies.

Each strategy turns a URL into an ``ExtractedContent`` or raises an
``ExtractionError``. The set is closed: ``StrategyName`` lists every
variant and ``build_strategies`` constructs all of them from one
``Settings`` object, which keeps credentials injectable in tests.
"""

import re
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import httpx
from bs4 import BeautifulSoup
from readability import Document
from readability.readability import Unparseable

from services.extractor import html_scraping
from services.extractor.cleaner import decode_entities, hostname
from shared.app_logging.logger import get_logger
from shared.config.settings import Settings
from shared.schemas.messages import ExtractedContent, ImageRef
from shared.utils.errors import (ConfigurationError, ContentTooShortError,
                                 ExtractionError, NetworkError,
                                 StructuralError)

logger = get_logger("extractor.strategies")

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}
BASIC_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; ReadZeroBot/1.0)",
    "Accept": "text/html",
}

X_POST_URL = re.compile(r"(?:twitter\.com|x\.com)/([^/]+)/status/(\d+)")
MIN_POST_TEXT = 20
POST_TITLE_MAX = 120
ERROR_BODY_PREVIEW = 500


class StrategyName(str, Enum):
    READABILITY = "readability"
    READER_PROXY = "reader_proxy"
    BASIC = "basic"
    AI_SEARCH = "ai_search"


class ExtractionStrategy:
    """Shared HTTP plumbing. Subclasses implement ``attempt``."""

    name: StrategyName

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    async def attempt(self, url: str) -> ExtractedContent:
        raise NotImplementedError

    async def _request(self, method: str, url: str, timeout=httpx.USE_CLIENT_DEFAULT, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
                response = await client.request(method, url, timeout=timeout, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Timed out requesting {url}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

        if not response.is_success:
            raise NetworkError(
                f"HTTP {response.status_code}: {response.reason_phrase} - {response.text[:ERROR_BODY_PREVIEW]}",
                status_code=response.status_code,
            )
        return response


class ReadabilityStrategy(ExtractionStrategy):
    """Fetch the page directly and isolate the main node with readability."""

    name = StrategyName.READABILITY

    async def attempt(self, url: str) -> ExtractedContent:
        extraction = self.settings.extraction
        response = await self._request("GET", url, headers=BROWSER_HEADERS, timeout=extraction.fetch_timeout)
        html = response.text

        try:
            doc = Document(html, url=url, retry_length=extraction.readability_min_length)
            article_html = doc.summary()
        except Unparseable as e:
            raise ContentTooShortError(f"Readability could not parse article: {e}") from e

        text = BeautifulSoup(article_html, "html.parser").get_text(separator="\n", strip=True)
        if not text or len(text) < extraction.readability_min_length:
            raise ContentTooShortError("Readability could not parse article or content too short")

        title = doc.title()
        if title == "[no-title]":
            title = ""
        excerpt = text.split("\n", 1)[0][:300]

        return ExtractedContent(
            title=decode_entities(title),
            description=decode_entities(html_scraping.meta_description(html) or excerpt),
            content=text,
            images=html_scraping.extract_images(html, url, limit=extraction.max_images),
            site_name=decode_entities(html_scraping.site_name(html) or ""),
            author=decode_entities(html_scraping.meta_author(html) or ""),
        )


class ReaderProxyStrategy(ExtractionStrategy):
    """Delegate to the reader service, which renders pages we cannot fetch."""

    name = StrategyName.READER_PROXY

    async def attempt(self, url: str) -> ExtractedContent:
        reader = self.settings.reader
        headers = {
            "Accept": "application/json",
            "X-With-Images-Summary": "true",
            "X-With-Links-Summary": "true",
        }
        if reader.api_key:
            headers["Authorization"] = f"Bearer {reader.api_key}"

        response = await self._request("GET", f"{reader.base_url}{url}", headers=headers, timeout=reader.timeout)
        try:
            payload = response.json()
        except ValueError as e:
            raise StructuralError("Reader returned a non-JSON body") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if not data:
            raise StructuralError("Reader returned empty data")

        return ExtractedContent(
            title=decode_entities(data.get("title") or ""),
            description=decode_entities(data.get("description") or ""),
            content=decode_entities(data.get("content") or ""),
            images=_reader_images(data.get("images")),
            site_name=data.get("siteName"),
            author=data.get("author"),
        )


def _reader_images(raw: Any) -> List[ImageRef]:
    """The reader returns images as a list of objects/URLs or as an ``{alt: url}`` summary."""
    if isinstance(raw, dict):
        return [ImageRef(src=src, alt=alt) for alt, src in raw.items() if isinstance(src, str)]

    images = []
    for item in raw or []:
        if isinstance(item, str):
            images.append(ImageRef(src=item))
        elif isinstance(item, dict) and (item.get("src") or item.get("url")):
            images.append(ImageRef(src=item.get("src") or item.get("url"), alt=item.get("alt")))
    return images


class BasicStrategy(ExtractionStrategy):
    """Last resort. Scrapes raw HTML with regexes and always returns a record once fetched."""

    name = StrategyName.BASIC

    async def attempt(self, url: str) -> ExtractedContent:
        response = await self._request("GET", url, headers=BASIC_HEADERS)
        html = response.text

        hero = html_scraping.og_image(html)
        content = html_scraping.extract_body_text(html)

        return ExtractedContent(
            title=decode_entities(html_scraping.page_title(html) or hostname(url)),
            description=decode_entities(html_scraping.meta_description(html) or ""),
            content=decode_entities(content or f"Visit the original article at: {url}"),
            images=[ImageRef(src=hero, alt="")] if hero else [],
            site_name=decode_entities(html_scraping.site_name(html) or ""),
        )


def parse_post_url(url: str) -> Optional[Tuple[str, str]]:
    """``(handle, post_id)`` for an X/Twitter status URL."""
    match = X_POST_URL.search(url)
    return (match.group(1), match.group(2)) if match else None


def assistant_output_text(result: Dict[str, Any]) -> str:
    """Answer text of the last assistant message carrying an ``output_text`` part.

    Earlier messages may be interim narration between search calls.
    """
    text = ""
    for item in result.get("output") or []:
        if item.get("type") != "message" or item.get("role") != "assistant":
            continue
        for part in item.get("content") or []:
            if part.get("type") == "output_text" and part.get("text"):
                text = part["text"]
                break
    return text


def derive_post_title(text: str, handle: str) -> str:
    for line in text.split("\n"):
        candidate = re.sub(r"^\*\*.*?\*\*\s*", "", line)
        candidate = re.sub(r"^#+\s*", "", candidate).strip()
        if 20 < len(candidate) < 200:
            suffix = "..." if len(candidate) > POST_TITLE_MAX else ""
            return candidate[:POST_TITLE_MAX] + suffix
    return f"X post by @{handle}"


class AISearchStrategy(ExtractionStrategy):
    """Ask an AI search tool with native X access to transcribe one post."""

    name = StrategyName.AI_SEARCH

    async def attempt(self, url: str) -> ExtractedContent:
        xai = self.settings.xai
        if not xai.api_key:
            raise ConfigurationError("XAI_API_KEY is not set")

        parsed = parse_post_url(url)
        if not parsed:
            raise ExtractionError("Could not parse X/Twitter URL")
        handle, post_id = parsed
        logger.info(f"Looking up X post @{handle}/{post_id}")

        body = {
            "model": xai.model,
            "tools": [{"type": "x_search", "x_search": {"allowed_x_handles": [handle]}}],
            "input": [
                {
                    "role": "user",
                    "content": (
                        f"Find and extract the full content of this specific X post: {url}\n\n"
                        "Return the post content in a clean format with author, date, full text "
                        "(including thread if applicable), and engagement metrics."
                    ),
                }
            ],
        }
        response = await self._request(
            "POST",
            f"{xai.base_url.rstrip('/')}/responses",
            json=body,
            headers={"Authorization": f"Bearer {xai.api_key}"},
            timeout=xai.timeout,
        )
        try:
            result = response.json()
        except ValueError as e:
            raise StructuralError("AI search returned a non-JSON body") from e
        if not isinstance(result, dict):
            raise StructuralError("AI search returned an unexpected payload")

        text = assistant_output_text(result)
        if len(text) < MIN_POST_TEXT:
            raise ContentTooShortError("AI search returned empty or insufficient content")

        return ExtractedContent(
            title=derive_post_title(text, handle),
            description=text[:300],
            content=text,
            images=[],
            site_name="X",
            author=f"@{handle}",
        )


STRATEGY_CLASSES = {
    StrategyName.READABILITY: ReadabilityStrategy,
    StrategyName.READER_PROXY: ReaderProxyStrategy,
    StrategyName.BASIC: BasicStrategy,
    StrategyName.AI_SEARCH: AISearchStrategy,
}


def build_strategies(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> Dict[StrategyName, ExtractionStrategy]:
    return {name: cls(settings, transport=transport) for name, cls in STRATEGY_CLASSES.items()}
