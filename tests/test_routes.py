"""
HTTP surface tests using FastAPI's TestClient.
"""
import pytest
from fastapi.testclient import TestClient

from learnpath.core.article_search import ArticleSearchService
from learnpath.core.course_generator import CourseGenerator, get_course_generator
from learnpath.core.video_search import VideoSearchService
from learnpath.main import app
from learnpath.routes.resource_routes import get_article_search, get_video_search

from tests.fakes import FailingProviderAdapter, mock_client, unreachable


@pytest.fixture
def client():
    app.dependency_overrides[get_course_generator] = lambda: CourseGenerator(
        provider_adapter=FailingProviderAdapter(),
        video_search=VideoSearchService(http_client=mock_client(unreachable)),
        article_search=ArticleSearchService(http_client=mock_client(unreachable)),
    )
    app.dependency_overrides[get_video_search] = lambda: VideoSearchService(http_client=mock_client(unreachable))
    app.dependency_overrides[get_article_search] = lambda: ArticleSearchService(http_client=mock_client(unreachable))
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestCourseRoutes:
    def test_generate_returns_template_curriculum(self, client):
        response = client.post("/ai/courses/generate", json={
            "topic": "Python",
            "level": "High School Level",
            "pace": "intensive",
            "goals": ["loops", "functions"],
        })

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "template"
        curriculum = body["curriculum"]
        assert curriculum["title"] == "Python - Project-Based Learning Path"
        assert curriculum["estimatedHours"] == 40
        assert "resourceNeeds" not in curriculum
        count = curriculum["resourceCount"]
        assert count["total"] == count["videos"] + count["articles"] == len(curriculum["resources"])
        assert response.headers["X-Request-ID"]

    def test_generate_rejects_empty_goals(self, client):
        response = client.post("/ai/courses/generate", json={
            "topic": "Python",
            "level": "High School Level",
            "pace": "intensive",
            "goals": [],
        })

        assert response.status_code == 422

    def test_generate_rejects_unknown_level(self, client):
        response = client.post("/ai/courses/generate", json={
            "topic": "Python",
            "level": "Kindergarten",
            "goals": ["loops"],
        })

        assert response.status_code == 422

    def test_summary(self, client):
        response = client.get("/ai/courses/summary", params={"topic": "Biology", "level": "Middle School Level"})

        assert response.status_code == 200
        assert response.json()["creditsRequired"] == 1

    def test_prompt_preview(self, client):
        response = client.post("/ai/courses/prompt", json={
            "topic": "Biology",
            "level": "Middle School Level",
            "pace": "casual",
            "goals": ["cells"],
        })

        assert "8-12 weeks with light weekly commitment" in response.json()["prompt"]


class TestResourceRoutes:
    def test_videos_fallback(self, client):
        response = client.get("/ai/resources/videos", params={"topic": "Chess"})

        body = response.json()
        assert body["total"] == 2
        assert body["resources"][0]["channelTitle"] == "YouTube Search"

    def test_video_details_not_found(self, client):
        response = client.get("/ai/resources/videos/abc123")

        assert response.status_code == 404

    def test_playlists_empty_without_api(self, client):
        assert client.get("/ai/resources/playlists", params={"topic": "Chess"}).json()["total"] == 0

    def test_articles(self, client):
        body = client.get("/ai/resources/articles", params={"topic": "Chess", "max_results": 3}).json()

        assert [r["priority"] for r in body["resources"]] == [1, 2, 3]

    def test_comprehensive_articles(self, client):
        body = client.get(
            "/ai/resources/articles/comprehensive",
            params={"topic": "Chess", "level": "Postgraduate Level"}
        ).json()

        assert len(body["all"]) == len(body["theory"]) + len(body["projects"])


def test_health(client):
    body = client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["providers"] == {"openai": False, "anthropic": False, "gemini": False}


def test_uvicorn_app_target_resolves():
    from uvicorn.importer import import_from_string

    assert import_from_string("learnpath.main:app") is app
