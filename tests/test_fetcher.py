"""Tests for health_trends.fetcher."""

import httpx

from health_trends.fetcher import collect_articles, fetch_articles, fetch_feeds
from health_trends.pipeline import build_http_client

from .helpers import rss_feed, rss_item

GOOD = "https://feeds.test/good.xml"
MISSING = "https://feeds.test/missing.xml"
BROKEN = "https://feeds.test/broken.xml"


def feed_handler(request: httpx.Request) -> httpx.Response:
    url = str(request.url)
    if url == GOOD:
        return httpx.Response(200, text=rss_feed(rss_item("Good", "https://x/good", "d")))
    if url == MISSING:
        return httpx.Response(404, text="not found")
    raise httpx.ConnectError("connection refused", request=request)


class TestFetchFeeds:
    async def test_skips_failed_sources(self, make_settings) -> None:
        async with build_http_client(
            make_settings(), transport=httpx.MockTransport(feed_handler)
        ) as client:
            documents = await fetch_feeds(client, [MISSING, GOOD, BROKEN])

        assert list(documents) == [GOOD]
        assert "https://x/good" in documents[GOOD]

    async def test_all_sources_failing_yields_empty_mapping(self, make_settings) -> None:
        async with build_http_client(
            make_settings(), transport=httpx.MockTransport(feed_handler)
        ) as client:
            assert await fetch_feeds(client, [MISSING, BROKEN]) == {}

    async def test_sends_user_agent(self, make_settings) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["User-Agent"])
            return httpx.Response(200, text="")

        settings = make_settings(USER_AGENT="HealthTrendsBot/1.0")
        async with build_http_client(
            settings, transport=httpx.MockTransport(handler)
        ) as client:
            await fetch_feeds(client, [GOOD])

        assert seen == ["HealthTrendsBot/1.0"]

    async def test_fetches_repeated_url_once(self, make_settings) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(200, text="")

        async with build_http_client(
            make_settings(), transport=httpx.MockTransport(handler)
        ) as client:
            await fetch_feeds(client, [GOOD, GOOD])

        assert calls == [GOOD]


class TestFetchArticles:
    async def test_returns_lifestyle_and_disease_separately(self, make_settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/lifestyle.xml":
                body = rss_feed(rss_item("Yoga at home", "https://x/yoga", "Stretch"))
            else:
                body = rss_feed(rss_item("Dengue cases rise", "https://x/dengue", "Alert"))
            return httpx.Response(200, text=body)

        async with build_http_client(
            make_settings(), transport=httpx.MockTransport(handler)
        ) as client:
            lifestyle, disease = await fetch_articles(
                client,
                ["https://feeds.test/lifestyle.xml"],
                ["https://feeds.test/disease.xml"],
            )

        assert [a.link for a in lifestyle] == ["https://x/yoga"]
        assert [a.link for a in disease] == ["https://x/dengue"]


class TestCollectArticles:
    def test_ignores_unparseable_documents(self) -> None:
        documents = {
            "a": "<html>maintenance</html>",
            "b": rss_feed(rss_item("T", "https://x/1", "D")),
        }
        assert [a.link for a in collect_articles(documents)] == ["https://x/1"]
