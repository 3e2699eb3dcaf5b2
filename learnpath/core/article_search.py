"""
Article lookups for course enrichment via Google Custom Search.

Live search needs both the search API key and the engine id; without them,
or on any error, results come from a fixed list of educational platforms
whose search pages are built from the topic.
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional
import asyncio

import httpx

from learnpath.config import settings, get_settings
from learnpath.core.exceptions import ResourceFetchError
from learnpath.core.logging import get_logger, metrics_logger
from learnpath.schemas import ArticleResource, ComprehensiveArticles
from learnpath.utils.urls import encode_uri_component, hostname

logger = get_logger(__name__)

ADAPTER_NAME = "articles"

LEVEL_MODIFIERS = {
    "Elementary/Primary Level": "basics introduction simple",
    "Middle School Level": "beginner fundamentals",
    "High School Level": "intermediate tutorial",
    "Undergraduate/Tertiary Level": "comprehensive guide course",
    "Postgraduate Level": "advanced research",
    "Professional/Continuing Education": "professional best practices",
}

PROJECT_SUFFIX = "project tutorial hands-on practice"


def _platforms(topic: str) -> List[Dict[str, str]]:
    encoded = encode_uri_component(topic)
    return [
        {
            "name": "Medium",
            "url": f"https://medium.com/search?q={encoded}",
            "description": f"Comprehensive guides and tutorials on {topic}",
        },
        {
            "name": "freeCodeCamp",
            "url": f"https://www.freecodecamp.org/news/search/?query={encoded}",
            "description": f"Learn {topic} with free tutorials and articles",
        },
        {
            "name": "Dev.to",
            "url": f"https://dev.to/search?q={encoded}",
            "description": f"Community articles and discussions on {topic}",
        },
        {
            "name": "GeeksforGeeks",
            "url": f"https://www.geeksforgeeks.org/?s={encoded}",
            "description": f"Technical articles and examples for {topic}",
        },
        {
            "name": "Wikipedia",
            "url": f"https://en.wikipedia.org/wiki/{encoded.replace('%20', '_')}",
            "description": f"Comprehensive overview and background on {topic}",
        },
    ]


def curated_articles(topic: str, count: int = 5) -> List[ArticleResource]:
    """Platform search links for a topic, ranked by ``priority`` from 1"""
    return [
        ArticleResource(
            title=f"{topic} - {platform['name']} Resource",
            url=platform["url"],
            description=platform["description"],
            source=platform["name"],
            priority=index,
        )
        for index, platform in enumerate(_platforms(topic)[:max(count, 0)], start=1)
    ]


class ArticleSearchService:
    """Article search with deterministic curated fallback"""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        engine_id: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.http_client = http_client
        self._api_key = api_key
        self._engine_id = engine_id
        self.base_url = base_url or settings.google_search_api_url

    def credentials(self) -> tuple[Optional[str], Optional[str]]:
        current = get_settings()
        return (
            self._api_key or current.google_search_api_key,
            self._engine_id or current.google_search_engine_id,
        )

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.http_client is not None:
            yield self.http_client
        else:
            async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
                yield client

    async def _search_live(self, query: str, max_results: int) -> List[ArticleResource]:
        api_key, engine_id = self.credentials()
        async with self._client() as client:
            response = await client.get(self.base_url, params={
                "key": api_key,
                "cx": engine_id,
                "q": f"{query} tutorial guide",
                "num": max_results,
            })
            response.raise_for_status()
            data: Dict[str, Any] = response.json()

        articles = []
        for item in data["items"]:
            link = item["link"]
            metatags = (item.get("pagemap") or {}).get("metatags") or [{}]
            articles.append(ArticleResource(
                title=item["title"],
                url=link,
                description=item.get("snippet") or "",
                source=hostname(link) or "",
                published_at=metatags[0].get("article:published_time"),
            ))
        return articles

    async def search_articles(
        self,
        query: str,
        max_results: int = 5,
        fallback_topic: Optional[str] = None
    ) -> List[ArticleResource]:
        """
        Search articles for ``query``.

        Falls back to ``curated_articles(fallback_topic or query)`` when
        search credentials are missing or the live search fails.
        """
        api_key, engine_id = self.credentials()
        try:
            if not (api_key and engine_id):
                raise ResourceFetchError("Article search credentials not configured")
            articles = await self._search_live(query, max_results)
        except Exception as e:
            logger.warning("Article search unavailable, using curated articles", query=query, error=str(e))
            articles = curated_articles(fallback_topic or query, max_results)
            metrics_logger.log_resource_lookup(ADAPTER_NAME, query, len(articles), fallback=True)
            return articles

        metrics_logger.log_resource_lookup(ADAPTER_NAME, query, len(articles))
        return articles

    async def curate_articles_by_level(self, topic: str, level: str) -> List[ArticleResource]:
        modifier = LEVEL_MODIFIERS.get(level, "tutorial")
        return await self.search_articles(f"{topic} {modifier}", 5, fallback_topic=topic)

    async def find_project_articles(self, topic: str) -> List[ArticleResource]:
        return await self.search_articles(f"{topic} {PROJECT_SUFFIX}", 5, fallback_topic=topic)

    async def get_comprehensive_articles(self, topic: str, level: str) -> ComprehensiveArticles:
        """Theory and project articles fetched concurrently; a failed half is replaced by curated links"""
        theory, projects = await asyncio.gather(
            self.curate_articles_by_level(topic, level),
            self.find_project_articles(topic),
            return_exceptions=True,
        )
        if isinstance(theory, BaseException):
            logger.error("Theory article curation failed", topic=topic, error=str(theory))
            theory = curated_articles(topic, 3)
        if isinstance(projects, BaseException):
            logger.error("Project article curation failed", topic=topic, error=str(projects))
            projects = curated_articles(f"{topic} projects", 2)

        return ComprehensiveArticles(theory=theory, projects=projects, all=[*theory, *projects])
