from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EducationLevel(str, Enum):
    ELEMENTARY = "Elementary/Primary Level"
    MIDDLE_SCHOOL = "Middle School Level"
    HIGH_SCHOOL = "High School Level"
    UNDERGRADUATE = "Undergraduate/Tertiary Level"
    POSTGRADUATE = "Postgraduate Level"
    PROFESSIONAL = "Professional/Continuing Education"


class LearningPace(str, Enum):
    SELF_PACED = "self-paced"
    INTENSIVE = "intensive"
    CASUAL = "casual"


Difficulty = Literal["Beginner", "Intermediate", "Advanced"]


# ======================= Curriculum =======================

class Module(CamelModel):
    id: int = Field(gt=0)
    title: str
    objectives: List[str] = Field(default_factory=list)
    duration: str = ""
    topics: List[str] = Field(default_factory=list)


class Project(CamelModel):
    id: int = Field(gt=0)
    title: str
    description: str = ""
    skills: List[str] = Field(default_factory=list)
    difficulty: Optional[Difficulty] = None
    estimated_hours: Optional[int] = None


class Milestone(CamelModel):
    id: int = Field(gt=0)
    title: str
    description: str = ""
    # Not checked against Curriculum.modules
    module_ids: List[int] = Field(default_factory=list)


class ResourceNeeds(CamelModel):
    video_topics: List[str] = Field(default_factory=list)
    article_topics: List[str] = Field(default_factory=list)
    practice_areas: List[str] = Field(default_factory=list)


class VideoResource(CamelModel):
    type: Literal["video"] = "video"
    title: str
    url: str
    description: str = ""
    thumbnail: Optional[str] = None
    channel_title: Optional[str] = None
    published_at: Optional[str] = None
    video_id: Optional[str] = None


class PlaylistResource(CamelModel):
    type: Literal["playlist"] = "playlist"
    title: str
    url: str
    description: str = ""
    thumbnail: Optional[str] = None
    channel_title: Optional[str] = None
    published_at: Optional[str] = None
    playlist_id: Optional[str] = None


class ArticleResource(CamelModel):
    type: Literal["article"] = "article"
    title: str
    url: str
    description: str = ""
    source: str = ""
    published_at: Optional[str] = None
    priority: Optional[int] = None


Resource = Annotated[
    Union[VideoResource, PlaylistResource, ArticleResource],
    Field(discriminator="type")
]


class ResourceCount(CamelModel):
    videos: int = 0
    articles: int = 0
    total: int = 0

    @classmethod
    def from_counts(cls, videos: int, articles: int) -> "ResourceCount":
        return cls(videos=videos, articles=articles, total=videos + articles)


class Curriculum(CamelModel):
    title: str = "Learning Path"
    description: str = ""
    duration: Optional[str] = None
    estimated_hours: Optional[int] = None
    modules: List[Module] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    milestones: List[Milestone] = Field(default_factory=list)
    # Enrichment hints only, never serialized
    resource_needs: Optional[ResourceNeeds] = Field(default=None, exclude=True)
    resources: Optional[List[Resource]] = None
    resource_count: Optional[ResourceCount] = None


class GenerationSource(str, Enum):
    AI = "ai"
    TEMPLATE = "template"


class GenerationResult(CamelModel):
    source: GenerationSource
    curriculum: Curriculum


# ======================= API =======================

class GenerateCourseRequest(CamelModel):
    topic: str = Field(min_length=1)
    level: EducationLevel
    pace: LearningPace = LearningPace.SELF_PACED
    goals: List[str] = Field(min_length=1)

    @field_validator("goals")
    def validate_goals(cls, v):
        goals = [g.strip() for g in v if g and g.strip()]
        if not goals:
            raise ValueError("at least one non-blank goal is required")
        return goals


class CoursePromptResponse(CamelModel):
    prompt: str


class CourseSummary(CamelModel):
    topic: str
    level: str
    estimated_modules: str
    estimated_projects: str
    credits_required: int
    approx_duration: str


class VideoDetails(CamelModel):
    duration: Optional[str] = None
    view_count: Optional[int] = None
    like_count: Optional[int] = None
    comment_count: Optional[int] = None


class ComprehensiveArticles(CamelModel):
    theory: List[ArticleResource]
    projects: List[ArticleResource]
    all: List[ArticleResource]


class ResourceListResponse(CamelModel):
    topic: str
    resources: List[Resource]
    total: int


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    providers: Dict[str, bool] = Field(default_factory=dict)
