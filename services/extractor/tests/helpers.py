import httpx

from shared.config.settings import (CompletionSettings, ReaderSettings,
                                    SearchSettings, Settings, XAISettings)

ARTICLE_BODY = " ".join(
    f"Sentence number {i} explains another detail of the storage engine rewrite." for i in range(60)
)

ARTICLE_HTML = f"""
<html><head><title>Storage engine rewrite | Example Blog</title>
<meta name="description" content="How we rewrote the storage engine">
<meta property="og:site_name" content="Example Blog">
</head><body>
<nav>Home About</nav>
<article><h1>Storage engine rewrite</h1><p>{ARTICLE_BODY}</p></article>
</body></html>
"""


def make_settings(**keys) -> Settings:
    """Settings with explicit credentials; anything not given is absent."""
    return Settings(
        completion=CompletionSettings(api_key=keys.get("completion")),
        reader=ReaderSettings(api_key=keys.get("reader")),
        search=SearchSettings(api_key=keys.get("search")),
        xai=XAISettings(api_key=keys.get("xai")),
    )


def transport_for(routes):
    """MockTransport dispatching on (method, host) or host; unknown hosts get 404."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        route = routes.get((request.method, request.url.host)) or routes.get(request.url.host)
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request) if callable(route) else route

    transport = httpx.MockTransport(handler)
    transport.calls = calls
    return transport




class DummyResponse:
    def __init__(self, content):
        # the real .choices[0].message.content
        msg = type("M", (), {"content": content})
        self.choices = [type("C", (), {"message": msg})]


class DummyChat:
    def __init__(self, response=None, error=None):
        self.completions = self
        self._response = response
        self._error = error
        self.calls = []

    async def create(self, *args, **kw):
        self.calls.append(kw)
        if self._error:
            raise self._error
        return self._response


class DummyClient:
    """Stands in for ``AsyncOpenAI``: ``client.chat.completions.create()``."""

    def __init__(self, content="{}", error=None, response=None):
        self.chat = DummyChat(response or DummyResponse(content), error)

    @property
    def calls(self):
        return self.chat.calls
