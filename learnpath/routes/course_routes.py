"""
Course generation routes
"""
from fastapi import APIRouter, Depends, Query

from learnpath.core.course_generator import CourseGenerator, build_course_prompt, get_course_generator
from learnpath.core.logging import get_logger
from learnpath.core.template_generator import course_summary
from learnpath.schemas import (
    CoursePromptResponse,
    CourseSummary,
    EducationLevel,
    GenerateCourseRequest,
    GenerationResult,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/ai/courses", tags=["courses"])


@router.post("/generate", response_model=GenerationResult)
async def generate_course(
    req: GenerateCourseRequest,
    generator: CourseGenerator = Depends(get_course_generator)
):
    """
    Generate a project-based curriculum for a learning path.

    Always answers with a curriculum; ``source`` tells whether it came from
    the LLM (``ai``) or the rule-based fallback (``template``). Credit checks
    and persistence belong to the caller.
    """
    logger.info(
        "Course generation request received",
        topic=req.topic,
        level=req.level.value,
        pace=req.pace.value,
        goals=len(req.goals)
    )
    return await generator.generate_with_source(req.topic, req.level, req.pace, req.goals)


@router.get("/summary", response_model=CourseSummary)
async def get_course_summary(
    topic: str = Query(..., min_length=1),
    level: EducationLevel = Query(...)
):
    """Preview of what a generated course contains and costs"""
    return course_summary(topic, level.value)


@router.post("/prompt", response_model=CoursePromptResponse)
async def preview_course_prompt(req: GenerateCourseRequest):
    """Prompt that would be sent to the LLM for this request"""
    return CoursePromptResponse(
        prompt=build_course_prompt(req.topic, req.level.value, req.pace.value, req.goals)
    )
