"""
YouTube Data API lookups for course enrichment.

Every public lookup degrades instead of raising: video searches fall back to
two YouTube search-page links built from the topic, playlist searches to an
empty list and detail lookups to ``None``.
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional
import asyncio

import httpx

from learnpath.config import settings, get_settings
from learnpath.core.exceptions import ResourceFetchError
from learnpath.core.logging import get_logger, metrics_logger
from learnpath.schemas import PlaylistResource, VideoDetails, VideoResource
from learnpath.utils.urls import youtube_playlist_url, youtube_search_url, youtube_video_url

logger = get_logger(__name__)

ADAPTER_NAME = "youtube"

# Search keyword appended per education level
VIDEO_LEVEL_KEYWORDS = {
    "Elementary/Primary Level": "for kids",
    "Middle School Level": "for beginners",
    "High School Level": "tutorial",
    "Undergraduate/Tertiary Level": "course",
    "Postgraduate Level": "advanced",
    "Professional/Continuing Education": "professional",
}


def fallback_videos(topic: str) -> List[VideoResource]:
    """Search-page links used when the YouTube API is unavailable"""
    return [
        VideoResource(
            title=f"{topic} - Introduction and Basics",
            url=youtube_search_url(topic),
            description=f"Search for {topic} tutorials on YouTube",
            channel_title="YouTube Search",
        ),
        VideoResource(
            title=f"{topic} - Practical Projects",
            url=youtube_search_url(f"{topic} projects"),
            description=f"Find practical {topic} projects on YouTube",
            channel_title="YouTube Search",
        ),
    ]


def _thumbnail(snippet: Dict[str, Any]) -> Optional[str]:
    thumbnails = snippet.get("thumbnails") or {}
    for size in ("medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return None


class VideoSearchService:
    """Video and playlist search against the YouTube Data API v3"""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.http_client = http_client
        self._api_key = api_key
        self.base_url = (base_url or settings.youtube_api_url).rstrip("/")

    def api_key(self) -> Optional[str]:
        return self._api_key or get_settings().youtube_api_key

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.http_client is not None:
            yield self.http_client
        else:
            async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
                yield client

    async def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        key = self.api_key()
        if not key:
            raise ResourceFetchError("YouTube API key not configured")

        async with self._client() as client:
            response = await client.get(f"{self.base_url}/{endpoint}", params={**params, "key": key})
            response.raise_for_status()
            return response.json()

    async def search_videos(
        self,
        topic: str,
        max_results: int = 10,
        order: str = "relevance"
    ) -> List[VideoResource]:
        """Search videos for a topic; returns the two fallback links on any failure"""
        try:
            data = await self._get("search", {
                "part": "snippet",
                "q": topic,
                "type": "video",
                "maxResults": max_results,
                "order": order,
                "videoDefinition": "any",
                "videoLicense": "any",
                "safeSearch": "moderate",
            })
            videos = []
            for item in data["items"]:
                snippet = item["snippet"]
                video_id = item["id"]["videoId"]
                videos.append(VideoResource(
                    title=snippet["title"],
                    url=youtube_video_url(video_id),
                    description=snippet.get("description") or "",
                    thumbnail=_thumbnail(snippet),
                    channel_title=snippet.get("channelTitle"),
                    published_at=snippet.get("publishedAt"),
                    video_id=video_id,
                ))
        except Exception as e:
            logger.warning("YouTube video search failed, using fallback", topic=topic, error=str(e))
            videos = fallback_videos(topic)
            metrics_logger.log_resource_lookup(ADAPTER_NAME, topic, len(videos), fallback=True)
            return videos

        metrics_logger.log_resource_lookup(ADAPTER_NAME, topic, len(videos))
        return videos

    async def get_video_details(self, video_id: str) -> Optional[VideoDetails]:
        """Duration and statistics for one video, or None"""
        try:
            data = await self._get("videos", {
                "part": "contentDetails,statistics",
                "id": video_id,
            })
            items = data.get("items") or []
            if not items:
                return None
            video = items[0]
            statistics = video.get("statistics") or {}
            return VideoDetails(
                duration=(video.get("contentDetails") or {}).get("duration"),
                view_count=statistics.get("viewCount"),
                like_count=statistics.get("likeCount"),
                comment_count=statistics.get("commentCount"),
            )
        except Exception as e:
            logger.warning("YouTube video details lookup failed", video_id=video_id, error=str(e))
            return None

    async def search_playlists(self, topic: str, max_results: int = 5) -> List[PlaylistResource]:
        """Search tutorial playlists; empty on failure"""
        query = f"{topic} tutorial playlist"
        try:
            data = await self._get("search", {
                "part": "snippet",
                "q": query,
                "type": "playlist",
                "maxResults": max_results,
                "order": "relevance",
            })
            playlists = []
            for item in data["items"]:
                snippet = item["snippet"]
                playlist_id = item["id"]["playlistId"]
                playlists.append(PlaylistResource(
                    title=snippet["title"],
                    url=youtube_playlist_url(playlist_id),
                    description=snippet.get("description") or "",
                    thumbnail=_thumbnail(snippet),
                    channel_title=snippet.get("channelTitle"),
                    published_at=snippet.get("publishedAt"),
                    playlist_id=playlist_id,
                ))
        except Exception as e:
            logger.warning("YouTube playlist search failed", topic=topic, error=str(e))
            metrics_logger.log_resource_lookup("youtube_playlists", query, 0, fallback=True)
            return []

        metrics_logger.log_resource_lookup("youtube_playlists", query, len(playlists))
        return playlists

    async def curate_educational_content(
        self,
        topic: str,
        level: str = "beginner"
    ) -> List[VideoResource | PlaylistResource]:
        """Level-aware videos plus a couple of playlists, fetched concurrently"""
        query = f"{topic} {VIDEO_LEVEL_KEYWORDS.get(level, 'tutorial')}"
        try:
            videos, playlists = await asyncio.gather(
                self.search_videos(query, 8, "relevance"),
                self.search_playlists(topic, 2),
            )
        except Exception as e:
            logger.error("Educational content curation failed", topic=topic, error=str(e))
            return list(fallback_videos(topic))
        return [*videos, *playlists]
