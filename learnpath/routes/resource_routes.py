"""
Learning resource lookup routes (videos, playlists, articles)
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from learnpath.core.article_search import ArticleSearchService
from learnpath.core.logging import get_logger
from learnpath.core.video_search import VideoSearchService
from learnpath.schemas import ComprehensiveArticles, ResourceListResponse, VideoDetails

logger = get_logger(__name__)

router = APIRouter(prefix="/ai/resources", tags=["resources"])

VIDEO_ORDERS = "^(relevance|date|rating|viewCount|title)$"


def get_video_search() -> VideoSearchService:
    return VideoSearchService()


def get_article_search() -> ArticleSearchService:
    return ArticleSearchService()


@router.get("/videos", response_model=ResourceListResponse)
async def search_videos(
    topic: str = Query(..., min_length=1),
    max_results: int = Query(10, ge=1, le=50),
    order: str = Query("relevance", pattern=VIDEO_ORDERS),
    videos: VideoSearchService = Depends(get_video_search)
):
    """Videos for a topic; search-page links when YouTube is unavailable"""
    results = await videos.search_videos(topic, max_results, order)
    return ResourceListResponse(topic=topic, resources=results, total=len(results))


@router.get("/videos/{video_id}", response_model=VideoDetails)
async def get_video_details(
    video_id: str,
    videos: VideoSearchService = Depends(get_video_search)
):
    details = await videos.get_video_details(video_id)
    if details is None:
        raise HTTPException(status_code=404, detail=f"Video {video_id} not found")
    return details


@router.get("/playlists", response_model=ResourceListResponse)
async def search_playlists(
    topic: str = Query(..., min_length=1),
    max_results: int = Query(5, ge=1, le=50),
    videos: VideoSearchService = Depends(get_video_search)
):
    results = await videos.search_playlists(topic, max_results)
    return ResourceListResponse(topic=topic, resources=results, total=len(results))


@router.get("/curated", response_model=ResourceListResponse)
async def curate_content(
    topic: str = Query(..., min_length=1),
    level: Optional[str] = Query(None),
    videos: VideoSearchService = Depends(get_video_search)
):
    """Level-aware videos combined with tutorial playlists"""
    results = await videos.curate_educational_content(topic, level or "beginner")
    return ResourceListResponse(topic=topic, resources=results, total=len(results))


@router.get("/articles", response_model=ResourceListResponse)
async def search_articles(
    topic: str = Query(..., min_length=1),
    max_results: int = Query(5, ge=1, le=10),
    articles: ArticleSearchService = Depends(get_article_search)
):
    results = await articles.search_articles(topic, max_results)
    return ResourceListResponse(topic=topic, resources=results, total=len(results))


@router.get("/articles/comprehensive", response_model=ComprehensiveArticles)
async def comprehensive_articles(
    topic: str = Query(..., min_length=1),
    level: str = Query(""),
    articles: ArticleSearchService = Depends(get_article_search)
):
    """Theory and project articles for a topic at a given level"""
    return await articles.get_comprehensive_articles(topic, level)
