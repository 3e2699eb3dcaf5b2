"""
Course generation pipeline: prompt -> LLM -> parse -> enrich, with a template fallback
"""
from enum import Enum
from itertools import chain
from typing import Any, Iterable, List, Optional, Sequence, Tuple
import asyncio
import time
import uuid

from learnpath.config import settings
from learnpath.core.article_search import ArticleSearchService
from learnpath.core.curriculum_parser import coerce_curriculum, parse_course_response
from learnpath.core.exceptions import EnrichmentError
from learnpath.core.llm import ProviderAdapter
from learnpath.core.logging import get_logger, generation_id_var, log_execution_time, metrics_logger
from learnpath.core.template_generator import build_template_curriculum
from learnpath.core.video_search import VideoSearchService
from learnpath.schemas import (
    ArticleResource,
    Curriculum,
    GenerationResult,
    GenerationSource,
    ResourceCount,
    VideoResource,
)

logger = get_logger(__name__)

PACE_INFO = {
    "self-paced": "4-8 weeks with flexible scheduling",
    "intensive": "2-4 weeks with daily practice",
    "casual": "8-12 weeks with light weekly commitment",
}


class GenerationStage(str, Enum):
    START = "start"
    PROMPT_BUILT = "prompt_built"
    LLM_CALLED = "llm_called"
    PARSED = "parsed"
    TEMPLATE_FALLBACK = "template_fallback"
    ENRICHING = "enriching"
    DONE = "done"


def _plain(value: Any) -> str:
    """Enum members and strings alike as their plain string value"""
    return str(getattr(value, "value", value) or "")


def build_course_prompt(topic: str, level: str, pace: str, goals: Sequence[str]) -> str:
    """Prompt asking the model for a project-based curriculum as a bare JSON object"""
    duration = PACE_INFO.get(pace, "4-8 weeks")

    return f"""You are an expert educational curriculum designer specializing in project-based learning. Create a comprehensive learning path for the following:

Topic: {topic}
Educational Level: {level}
Learning Pace: {pace} ({duration})
Learning Goals: {', '.join(goals)}

Create a project-based learning curriculum with the following structure:

1. COURSE OVERVIEW
   - Brief description (2-3 sentences)
   - Key outcomes students will achieve
   - Total estimated time commitment

2. MODULES (Create 4-6 modules)
   For each module, provide:
   - Module title
   - Learning objectives (3-4 specific objectives)
   - Duration estimate
   - Key concepts covered

3. PROJECTS (Create 3-5 hands-on projects)
   For each project, provide:
   - Project title
   - Description (what students will build)
   - Skills practiced
   - Difficulty level (Beginner/Intermediate/Advanced)
   - Estimated time to complete

4. MILESTONES
   - Define 4-6 key checkpoints
   - Each milestone should mark significant progress

5. LEARNING RESOURCES NEEDED
   - List types of resources (videos, articles, documentation)
   - Specify what topics need video tutorials
   - Specify what topics need written guides

Format your response as valid JSON with this structure:
{{
  "title": "Course Title",
  "description": "Course description",
  "duration": "X weeks",
  "estimatedHours": number,
  "modules": [
    {{
      "id": number,
      "title": "Module title",
      "objectives": ["objective1", "objective2"],
      "duration": "X hours",
      "topics": ["topic1", "topic2"]
    }}
  ],
  "projects": [
    {{
      "id": number,
      "title": "Project title",
      "description": "What students will build",
      "skills": ["skill1", "skill2"],
      "difficulty": "Beginner|Intermediate|Advanced",
      "estimatedHours": number
    }}
  ],
  "milestones": [
    {{
      "id": number,
      "title": "Milestone title",
      "description": "What students should achieve",
      "moduleIds": [1, 2]
    }}
  ],
  "resourceNeeds": {{
    "videoTopics": ["topic1", "topic2"],
    "articleTopics": ["topic1", "topic2"],
    "practiceAreas": ["area1", "area2"]
  }}
}}

IMPORTANT: Return ONLY the JSON object, no additional text or markdown formatting."""


def _unique_topics(topics: Iterable[str]) -> List[str]:
    seen = set()
    unique = []
    for topic in topics:
        key = (topic or "").strip().lower()
        if key and key not in seen:
            seen.add(key)
            unique.append(topic.strip())
    return unique


def _unique_by_url(resources: Iterable[Any]) -> List[Any]:
    seen = set()
    unique = []
    for resource in resources:
        if resource.url not in seen:
            seen.add(resource.url)
            unique.append(resource)
    return unique


class CourseGenerator:
    """Generate a resource-enriched curriculum; falls back to the template path on any AI failure"""

    def __init__(
        self,
        provider_adapter: Optional[ProviderAdapter] = None,
        video_search: Optional[VideoSearchService] = None,
        article_search: Optional[ArticleSearchService] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        video_results: Optional[int] = None,
        max_subtopics: Optional[int] = None,
    ):
        self.provider_adapter = provider_adapter or ProviderAdapter()
        self.video_search = video_search or VideoSearchService()
        self.article_search = article_search or ArticleSearchService()
        self.provider = provider or settings.course_llm_provider
        self.model = model or settings.course_llm_model
        self.video_results = video_results or settings.enrichment_video_results
        self.max_subtopics = settings.enrichment_max_subtopics if max_subtopics is None else max_subtopics

    async def generate(self, topic: str, level: str, pace: str, goals: Sequence[str]) -> Curriculum:
        result = await self.generate_with_source(topic, level, pace, goals)
        return result.curriculum

    @log_execution_time
    async def generate_with_source(
        self,
        topic: str,
        level: str,
        pace: str,
        goals: Sequence[str]
    ) -> GenerationResult:
        """
        Run the full pipeline and report which path produced the curriculum.

        Errors from the AI path are logged and replaced by the template path,
        so this always returns a curriculum.
        """
        topic, level, pace = _plain(topic), _plain(level), _plain(pace)
        goals = [str(goal) for goal in (goals or [])]

        token = generation_id_var.set(str(uuid.uuid4()))
        start_time = time.time()
        try:
            logger.info("Course generation started", stage=GenerationStage.START.value,
                        topic=topic, level=level, pace=pace)
            try:
                curriculum = await self._generate_with_llm(topic, level, pace, goals)
                source = GenerationSource.AI
            except Exception as e:
                logger.warning("AI course generation failed, using template",
                               stage=GenerationStage.TEMPLATE_FALLBACK.value,
                               error=str(e),
                               error_type=type(e).__name__)
                curriculum = build_template_curriculum(topic, level, pace, goals)
                source = GenerationSource.TEMPLATE

            enriched = await self.enrich(curriculum, topic, level)

            metrics_logger.log_generation_complete(
                source.value, time.time() - start_time, enriched.resource_count.total
            )
            logger.info("Course generation finished", stage=GenerationStage.DONE.value, source=source.value)
            return GenerationResult(source=source, curriculum=enriched)
        finally:
            generation_id_var.reset(token)

    async def _generate_with_llm(self, topic: str, level: str, pace: str, goals: List[str]) -> Curriculum:
        prompt = build_course_prompt(topic, level, pace, goals)
        logger.info("Course prompt built", stage=GenerationStage.PROMPT_BUILT.value, prompt_length=len(prompt))

        response = await self.provider_adapter.send(self.provider, self.model, prompt)
        logger.info("Course LLM response received", stage=GenerationStage.LLM_CALLED.value,
                    provider=self.provider, response_length=len(response))

        curriculum = coerce_curriculum(parse_course_response(response))
        logger.info("Course response parsed", stage=GenerationStage.PARSED.value,
                    modules=len(curriculum.modules),
                    projects=len(curriculum.projects),
                    milestones=len(curriculum.milestones))
        return curriculum

    async def _collect_resources(
        self,
        curriculum: Curriculum,
        topic: str,
        level: str
    ) -> Tuple[List[VideoResource], List[ArticleResource]]:
        try:
            needs = curriculum.resource_needs
            subtopics = needs.video_topics if needs is not None else [topic]
            video_topics = _unique_topics([topic, *subtopics])[:1 + self.max_subtopics]

            video_batches, article_batches = await asyncio.gather(
                asyncio.gather(*(
                    self.video_search.search_videos(video_topic, self.video_results)
                    for video_topic in video_topics
                )),
                asyncio.gather(
                    self.article_search.curate_articles_by_level(topic, level),
                    self.article_search.find_project_articles(topic),
                ),
            )

            videos = list(chain.from_iterable(video_batches))
            articles = _unique_by_url(chain.from_iterable(article_batches))
        except Exception as e:
            raise EnrichmentError(f"Resource collection failed: {e}", {"topic": topic}) from e
        return videos, articles

    async def enrich(self, curriculum: Curriculum, topic: str, level: str) -> Curriculum:
        """
        Return a copy of ``curriculum`` with ``resources`` and ``resource_count`` set.

        Videos for the main topic and up to ``max_subtopics`` video subtopics
        are searched concurrently with the level and project article searches.
        Videos come first; each video topic keeps all of its results, while
        articles repeated across the level and project searches are dropped.
        """
        logger.info("Enriching curriculum", stage=GenerationStage.ENRICHING.value, topic=topic)
        try:
            videos, articles = await self._collect_resources(curriculum, topic, level)
        except EnrichmentError as e:
            metrics_logger.log_enrichment_failure(topic, e.message)
            videos, articles = [], []

        return curriculum.model_copy(update={
            "resources": [*videos, *articles],
            "resource_count": ResourceCount.from_counts(len(videos), len(articles)),
        })


def get_course_generator() -> CourseGenerator:
    """Course generator wired with default collaborators"""
    return CourseGenerator()
