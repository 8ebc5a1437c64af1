import pytest

from services.extractor.cleaner import (clean, clean_title, decode_entities,
                                        hostname, strip_emojis)


def test_clean_strips_social_counters_and_ui_chrome():
    raw = "Great post about rust\n1,204 likes 87 comments\nLike Comment Repost Send\nReport this"
    cleaned = clean(raw)
    assert "likes" not in cleaned
    assert "Repost" not in cleaned
    assert "Report this" not in cleaned
    assert cleaned.startswith("Great post about rust")


def test_clean_removes_wikipedia_markers():
    raw = "From Wikipedia, the free encyclopedia Python is a language.[1] It has[edit] classes."
    assert clean(raw) == "Python is a language. It has classes."


def test_clean_collapses_blank_lines():
    assert clean("one\n\n\n\n\ntwo") == "one\n\ntwo"


def test_clean_drops_leading_title_line_when_body_follows():
    body = "This paragraph is the actual article body. " * 4
    cleaned = clean(f"A Headline\n{body}\nMore body text here.")
    assert not cleaned.startswith("A Headline")
    assert cleaned.startswith("This paragraph")


def test_clean_keeps_short_text_intact():
    assert clean("Headline\nshort\nbody") == "Headline\nshort\nbody"


@pytest.mark.parametrize("value", ["", None])
def test_clean_passes_empty_through(value):
    assert clean(value) == value


@pytest.mark.parametrize(
    "encoded, decoded",
    [
        ("Tom &amp; Jerry", "Tom & Jerry"),
        ("&lt;b&gt;", "<b>"),
        ("it&#39;s", "it's"),
        ("&#x2014;", "—"),
        ("a&nbsp;b", "a b"),
    ],
)
def test_decode_entities(encoded, decoded):
    assert decode_entities(encoded) == decoded


@pytest.mark.parametrize(
    "text",
    [
        "plain text",
        "Tom & Jerry",
        "5 < 6",
        "&unknown;",
        "GET /search?q=1&param=2",
        "Terms &copy policy",
        "x&notes=1",
    ],
)
def test_decode_entities_is_idempotent_on_decoded_text(text):
    once = decode_entities(text)
    assert decode_entities(once) == once


@pytest.mark.parametrize("text", ["GET /search?q=1&param=2", "Terms &copy policy", "x&notes=1"])
def test_decode_entities_leaves_unterminated_ampersands_alone(text):
    assert decode_entities(text) == text


def test_hostname_strips_www_and_tolerates_garbage():
    assert hostname("https://www.example.com/a") == "example.com"
    assert hostname("not a url") == ""
    assert hostname("http://[::1") == ""


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Rust 2.0 released | The Verge", "Rust 2.0 released"),
        ("Rust 2.0 released - Hacker News", "Rust 2.0 released"),
        ("What do you use for backups? : r/selfhosted", "What do you use for backups?"),
        ("Ask HN: backups (123 comments)", "Ask HN: backups"),
        ("Why tabs win [45 points]", "Why tabs win"),
        ("Post-mortem of outage", "Post-mortem of outage"),
    ],
)
def test_clean_title(title, expected):
    assert clean_title(title, "https://example.com/x") == expected


def test_clean_title_short_or_empty_falls_back_to_hostname():
    assert clean_title("", "https://www.example.com/x") == "example.com"
    assert clean_title("ab", "https://example.com/x") == "example.com"
    assert clean_title("", "garbage") == "Untitled"


def test_clean_title_truncates():
    assert len(clean_title("word " * 100, "https://example.com")) <= 200


def test_strip_emojis():
    assert strip_emojis("\U0001F680 Launch day ✅ is here \U0001F1FA\U0001F1F8") == "Launch day is here"
