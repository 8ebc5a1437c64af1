from services.extractor import html_scraping

PAGE = """
<html><head>
<title>Fixture Page</title>
<meta property="og:image" content="/hero.jpg">
<meta content="A fixture description" name="description">
<meta property="og:site_name" content="Fixture Times">
<meta name="author" content="Ada Lovelace">
</head>
<body>
<img src="/hero.jpg" alt="dup">
<img src="data:image/png;base64,AAAA">
<img src="https://cdn.example.com/tracking.gif">
<img src="/one.png" alt="First">
<img src="/two.png">
<img src="/three.png">
<img src="/four.png">
<img src="/five.png">
<article><h1>Heading</h1><p>Body   text</p></article>
</body></html>
"""


def test_meta_helpers():
    assert html_scraping.page_title(PAGE) == "Fixture Page"
    assert html_scraping.meta_description(PAGE) == "A fixture description"
    assert html_scraping.site_name(PAGE) == "Fixture Times"
    assert html_scraping.meta_author(PAGE) == "Ada Lovelace"
    assert html_scraping.og_image(PAGE) == "/hero.jpg"


def test_og_description_used_when_no_meta_description():
    html = '<meta property="og:description" content="From OG">'
    assert html_scraping.meta_description(html) == "From OG"


def test_extract_images_hero_first_capped_and_filtered():
    images = html_scraping.extract_images(PAGE, "https://example.com/post")

    assert len(images) == 5
    assert images[0].src == "https://example.com/hero.jpg"
    srcs = [image.src for image in images]
    assert len(set(srcs)) == 5
    assert not any("data:" in src or "tracking" in src for src in srcs)
    assert images[1].src == "https://example.com/one.png"
    assert images[1].alt == "First"


def test_extract_images_skips_malformed_src():
    html = (
        '<meta property="og:image" content="http://[broken/og.png">'
        '<img src="/hero.jpg"><img src="http://[broken/x.png"><img src="/ok.png">'
    )
    images = html_scraping.extract_images(html, "https://example.com/post")
    assert [i.src for i in images] == ["https://example.com/hero.jpg", "https://example.com/ok.png"]


def test_extract_images_without_og_image():
    html = '<img src="a.png"><img src="b.png">'
    images = html_scraping.extract_images(html, "https://example.com/dir/")
    assert [i.src for i in images] == ["https://example.com/dir/a.png", "https://example.com/dir/b.png"]


def test_body_text_prefers_article():
    assert html_scraping.extract_body_text(PAGE) == "Heading Body text"


def test_body_text_falls_back_to_main():
    html = "<body><nav>menu</nav><main><p>Main content</p></main></body>"
    assert html_scraping.extract_body_text(html) == "Main content"


def test_body_fallback_drops_scripts_and_caps_length():
    html = "<body><script>var x = 1;</script><style>p{}</style><p>" + "word " * 5000 + "</p></body>"
    text = html_scraping.extract_body_text(html)
    assert "var x" not in text
    assert len(text) == html_scraping.MAX_BODY_CHARS


def test_body_text_empty_without_body():
    assert html_scraping.extract_body_text("<p>fragment</p>") == ""
