"""
Regex-based scraping of raw HTML.

Used for image and meta-tag discovery alongside readability, and as the
whole of the last-resort ``basic`` strategy. Selection rules are
behavioural contracts: og:image first, at most five images, body fallback
capped at 10,000 characters.
"""

import re
from typing import List, Optional
from urllib.parse import urljoin

from shared.schemas.messages import ImageRef

MAX_IMAGES = 5
MAX_BODY_CHARS = 10000

_OG_IMAGE = (
    re.compile(r"""<meta[^>]+property=["']og:image["'][^>]+content=["']([^"']+)["']""", re.I),
    re.compile(r"""<meta[^>]+content=["']([^"']+)["'][^>]+property=["']og:image["']""", re.I),
)
_DESCRIPTION = (
    re.compile(r"""<meta[^>]+name=["']description["'][^>]+content=["']([^"']+)["']""", re.I),
    re.compile(r"""<meta[^>]+content=["']([^"']+)["'][^>]+name=["']description["']""", re.I),
    re.compile(r"""<meta[^>]+property=["']og:description["'][^>]+content=["']([^"']+)["']""", re.I),
)
_SITE_NAME = (
    re.compile(r"""<meta[^>]+property=["']og:site_name["'][^>]+content=["']([^"']+)["']""", re.I),
)
_AUTHOR = (
    re.compile(r"""<meta[^>]+name=["']author["'][^>]+content=["']([^"']+)["']""", re.I),
    re.compile(r"""<meta[^>]+content=["']([^"']+)["'][^>]+name=["']author["']""", re.I),
)
_IMG = re.compile(r"""<img[^>]+src=["']([^"']+)["'](?:[^>]*?alt=["']([^"']*)["'])?""", re.I)
_TITLE = re.compile(r"<title[^>]*>([^<]+)</title>", re.I)
_ARTICLE = re.compile(r"<article[^>]*>([\s\S]*?)</article>", re.I)
_MAIN = re.compile(r"<main[^>]*>([\s\S]*?)</main>", re.I)
_BODY = re.compile(r"<body[^>]*>([\s\S]*?)</body>", re.I)
_SCRIPT = re.compile(r"<script[\s\S]*?</script>", re.I)
_STYLE = re.compile(r"<style[\s\S]*?</style>", re.I)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")

_SKIPPED_IMAGE_MARKERS = ("data:", "tracking", "pixel")


def _first_match(patterns, html: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(html)
        if match and match.group(1):
            return match.group(1).strip()
    return None


def og_image(html: str) -> Optional[str]:
    return _first_match(_OG_IMAGE, html)


def meta_description(html: str) -> Optional[str]:
    """``<meta name=description>`` in either attribute order, then og:description."""
    return _first_match(_DESCRIPTION, html)


def site_name(html: str) -> Optional[str]:
    return _first_match(_SITE_NAME, html)


def meta_author(html: str) -> Optional[str]:
    return _first_match(_AUTHOR, html)


def page_title(html: str) -> Optional[str]:
    match = _TITLE.search(html)
    return match.group(1).strip() if match else None


def _absolute(base_url: str, src: str) -> Optional[str]:
    try:
        return urljoin(base_url, src)
    except ValueError:
        # e.g. "http://[broken/x.png"
        return None


def extract_images(html: str, base_url: str, limit: int = MAX_IMAGES) -> List[ImageRef]:
    """Hero ``og:image`` first, then inline ``<img>`` tags, deduplicated by absolute URL."""
    images: List[ImageRef] = []
    seen = set()

    hero = og_image(html)
    if hero:
        src = _absolute(base_url, hero)
        if src:
            images.append(ImageRef(src=src, alt=""))
            seen.add(src)

    for match in _IMG.finditer(html):
        if len(images) >= limit:
            break
        raw_src = match.group(1)
        if any(marker in raw_src for marker in _SKIPPED_IMAGE_MARKERS):
            continue
        src = _absolute(base_url, raw_src)
        if not src or src in seen:
            continue
        seen.add(src)
        images.append(ImageRef(src=src, alt=match.group(2) or ""))

    return images[:limit]


def _strip_tags(fragment: str) -> str:
    return _WHITESPACE.sub(" ", _TAG.sub(" ", fragment)).strip()


def extract_body_text(html: str) -> str:
    """Text of the first ``<article>``, else ``<main>``, else ``<body>``.

    Only the ``<body>`` fallback drops scripts and styles and is capped.
    """
    match = _ARTICLE.search(html) or _MAIN.search(html)
    if match:
        return _strip_tags(match.group(1))

    body = _BODY.search(html)
    if not body:
        return ""
    fragment = _STYLE.sub("", _SCRIPT.sub("", body.group(1)))
    return _strip_tags(fragment)[:MAX_BODY_CHARS]
