"""
Text cleanup applied to extracted content before it is stored or sent to
the completion service.
"""

import html
import re
from typing import List, Pattern, Tuple
from urllib.parse import urlparse

from shared.app_logging.logger import get_logger

logger = get_logger("extractor.cleaner")

# Applied in order. Site chrome first, whitespace last.
_NOISE_PATTERNS: List[Tuple[Pattern, str]] = [
    # Wikipedia
    (re.compile(r"Toggle the table of contents\s*", re.I), ""),
    (re.compile(r"From Wikipedia, the free encyclopedia", re.I), ""),
    (re.compile(r"\[edit\]", re.I), ""),
    (re.compile(r"\[\d+\]"), ""),
    # News sites
    (re.compile(r"\d+\s*(?:hours?|minutes?|days?|weeks?|months?)\s*ago", re.I), ""),
    (re.compile(r"Share\s*Save", re.I), ""),
    (re.compile(r"Share\s*Copy link", re.I), ""),
    (re.compile(r"Share\s*this\s*(?:article|post|story)", re.I), ""),
    (re.compile(r"\b(?:Getty Images|Reuters|Associated Press|AFP|EPA)\b"), ""),
    # LinkedIn
    (re.compile(r"\d+\s*(?:likes?|reactions?|comments?|reposts?|shares?|views?|followers?)\b", re.I), ""),
    (re.compile(r"Like\s*Comment\s*Repost\s*Send", re.I), ""),
    # X
    (re.compile(r"\d+\s*(?:retweets?|quotes?|replies|bookmarks?)\b", re.I), ""),
    # Reddit
    (re.compile(r"\d+\s*(?:upvotes?|downvotes?|points?|awards?)\b", re.I), ""),
    (re.compile(r"Posted by\s*u/\w+", re.I), ""),
    # Generic UI
    (re.compile(r"Copy link to post", re.I), ""),
    (re.compile(r"Report this", re.I), ""),
    (re.compile(r"\b(?:Follow|Connect)\s+\d+", re.I), ""),
    (re.compile(r"Read more", re.I), ""),
    (re.compile(r"Continue reading", re.I), ""),
    (re.compile(r"Advertisement", re.I), ""),
    # Whitespace
    (re.compile(r"\n{3,}"), "\n\n"),
    (re.compile(r"[ \t]{3,}"), " "),
]

_TITLE_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r"\s*\|\s*[^|]{1,50}$"), ""),
    (re.compile(r"\s+[-–—]\s+[^-–—]{1,50}$"), ""),
    (re.compile(r"\s*:\s*r/\w+\s*$"), ""),
    (re.compile(r"\s*\(\d+\s*comments?\)", re.I), ""),
    (re.compile(r"\s*\[\d+\s*(?:upvotes?|points?)\]", re.I), ""),
    (re.compile(r"\s+by\s+\w+\s*$", re.I), ""),
    (re.compile(r"\s+"), " "),
]

_ENTITY = re.compile(r"&(?:#\d+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")

_EMOJI = re.compile(
    "["
    "\U0001F300-\U0001F9FF"  # pictographs, emoticons, transport
    "\u2600-\u26FF"  # misc symbols
    "\u2700-\u27BF"  # dingbats
    "\U0001F1E0-\U0001F1FF"  # regional indicators
    "]"
)
_DOUBLE_SPACE = re.compile(r"\s{2,}")

MAX_TITLE_LENGTH = 200
TITLE_LINE_MAX = 200
REMAINDER_MIN = 100


def clean(raw: str) -> str:
    """Strip navigation, metrics and boilerplate from extracted text."""
    if not raw:
        return raw

    cleaned = raw
    for pattern, replacement in _NOISE_PATTERNS:
        cleaned = pattern.sub(replacement, cleaned)
    cleaned = cleaned.strip()

    # Drop a leading title line when real content follows it.
    lines = cleaned.split("\n")
    if len(lines) > 2 and len(lines[0]) < TITLE_LINE_MAX:
        remainder = "\n".join(lines[1:]).strip()
        if len(remainder) > REMAINDER_MIN:
            cleaned = remainder

    return cleaned


def decode_entities(text: str) -> str:
    """Decode semicolon-terminated named and numeric HTML entities.

    Bare ampersands, as in query strings, are left alone. ``&nbsp;`` becomes a space.
    """
    if not text:
        return text
    return _ENTITY.sub(lambda m: html.unescape(m.group(0)).replace("\xa0", " "), text)


def hostname(url: str) -> str:
    """Bare hostname of ``url`` without a leading ``www.``; empty when unparsable."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def clean_title(title: str, url: str) -> str:
    """Remove site suffixes and social metadata from a page title."""
    if not title or len(title) < 3:
        return hostname(url) or "Untitled"

    cleaned = title
    for pattern, replacement in _TITLE_PATTERNS:
        cleaned = pattern.sub(replacement, cleaned)
    cleaned = cleaned.strip()[:MAX_TITLE_LENGTH]
    return cleaned or hostname(url) or "Untitled"


def strip_emojis(text: str) -> str:
    if not text:
        return text
    return _DOUBLE_SPACE.sub(" ", _EMOJI.sub("", text)).strip()
