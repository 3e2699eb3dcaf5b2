"""
Tests for the article enrichment adapter.
"""
import httpx
import pytest

from learnpath.core.article_search import ArticleSearchService, curated_articles

from tests.fakes import mock_client, unreachable


def search_response(*links):
    return {"items": [
        {
            "title": f"Article {index}",
            "link": link,
            "snippet": f"Snippet {index}",
            "pagemap": {"metatags": [{"article:published_time": "2024-01-0%dT00:00:00Z" % index}]},
        }
        for index, link in enumerate(links, start=1)
    ]}


class TestCuratedArticles:
    def test_five_platforms_ranked(self):
        articles = curated_articles("Data Science")

        assert [a.source for a in articles] == ["Medium", "freeCodeCamp", "Dev.to", "GeeksforGeeks", "Wikipedia"]
        assert [a.priority for a in articles] == [1, 2, 3, 4, 5]
        assert all(a.type == "article" for a in articles)
        assert articles[0].url == "https://medium.com/search?q=Data%20Science"
        assert articles[4].url == "https://en.wikipedia.org/wiki/Data_Science"
        assert articles[0].title == "Data Science - Medium Resource"

    def test_count_limits_entries(self):
        assert len(curated_articles("SQL", 3)) == 3
        assert curated_articles("SQL", 0) == []

    def test_unencodable_characters_are_replaced(self):
        articles = curated_articles("Rust \ud800")

        assert articles[0].url == "https://medium.com/search?q=Rust%20%3F"
        assert articles[4].url == "https://en.wikipedia.org/wiki/Rust_%3F"


class TestSearchArticles:
    @pytest.mark.asyncio
    async def test_unconfigured_uses_curated_list(self):
        service = ArticleSearchService(http_client=mock_client(unreachable))

        articles = await service.search_articles("Docker")

        assert [a.url for a in articles] == [a.url for a in curated_articles("Docker")]

    @pytest.mark.asyncio
    async def test_unencodable_query_still_falls_back(self):
        service = ArticleSearchService(http_client=mock_client(unreachable), api_key="k", engine_id="cx")

        articles = await service.search_articles("Rust \ud800", 3)

        assert [a.priority for a in articles] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_engine_id_alone_is_not_enough(self):
        service = ArticleSearchService(http_client=mock_client(unreachable), engine_id="cx")

        articles = await service.search_articles("Docker")

        assert articles[0].source == "Medium"

    @pytest.mark.asyncio
    async def test_live_results_are_mapped(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json=search_response("https://realpython.com/python-loops/"))

        service = ArticleSearchService(http_client=mock_client(handler), api_key="gs-key", engine_id="cx")

        articles = await service.search_articles("Python loops", 4)

        assert seen["q"] == "Python loops tutorial guide"
        assert seen["num"] == "4"
        assert seen["cx"] == "cx"
        article = articles[0]
        assert article.source == "realpython.com"
        assert article.description == "Snippet 1"
        assert article.published_at == "2024-01-01T00:00:00Z"
        assert article.priority is None

    @pytest.mark.asyncio
    async def test_credentials_from_environment(self, monkeypatch):
        def handler(request):
            return httpx.Response(200, json=search_response("https://example.org/a"))

        monkeypatch.setenv("GOOGLE_SEARCH_API_KEY", "gs-key")
        monkeypatch.setenv("GOOGLE_SEARCH_ENGINE_ID", "cx")
        service = ArticleSearchService(http_client=mock_client(handler))

        articles = await service.search_articles("Rust")

        assert [a.url for a in articles] == ["https://example.org/a"]

    @pytest.mark.asyncio
    async def test_api_error_uses_curated_list(self):
        def handler(request):
            return httpx.Response(429, json={"error": "rateLimitExceeded"})

        service = ArticleSearchService(http_client=mock_client(handler), api_key="gs-key", engine_id="cx")

        articles = await service.search_articles("Rust", 5, fallback_topic="Rust basics")

        assert articles[0].url == "https://medium.com/search?q=Rust%20basics"


class TestCuration:
    @pytest.mark.asyncio
    async def test_level_modifier_in_query(self):
        queries = []

        def handler(request):
            queries.append(request.url.params["q"])
            return httpx.Response(200, json=search_response("https://example.org/a"))

        service = ArticleSearchService(http_client=mock_client(handler), api_key="k", engine_id="cx")

        await service.curate_articles_by_level("Calculus", "Postgraduate Level")
        await service.curate_articles_by_level("Calculus", "Kindergarten")
        await service.find_project_articles("Calculus")

        assert queries == [
            "Calculus advanced research tutorial guide",
            "Calculus tutorial tutorial guide",
            "Calculus project tutorial hands-on practice tutorial guide",
        ]

    @pytest.mark.asyncio
    async def test_curation_fallback_uses_base_topic(self):
        service = ArticleSearchService()

        by_level = await service.curate_articles_by_level("Calculus", "High School Level")
        projects = await service.find_project_articles("Calculus")

        expected = [a.url for a in curated_articles("Calculus")]
        assert [a.url for a in by_level] == expected
        assert [a.url for a in projects] == expected

    @pytest.mark.asyncio
    async def test_comprehensive_combines_both(self):
        service = ArticleSearchService()

        result = await service.get_comprehensive_articles("Physics", "Middle School Level")

        assert len(result.theory) == 5
        assert len(result.projects) == 5
        assert result.all == [*result.theory, *result.projects]

    @pytest.mark.asyncio
    async def test_comprehensive_substitutes_failed_branch(self, monkeypatch):
        service = ArticleSearchService()

        async def broken(topic):
            raise RuntimeError("boom")

        monkeypatch.setattr(service, "find_project_articles", broken)

        result = await service.get_comprehensive_articles("Physics", "Middle School Level")

        assert len(result.theory) == 5
        assert [a.url for a in result.projects] == [a.url for a in curated_articles("Physics projects", 2)]
        assert len(result.all) == 7
