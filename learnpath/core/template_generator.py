"""
Rule-based curriculum used whenever the LLM path cannot produce one
"""
from typing import List

from learnpath.schemas import Curriculum, CourseSummary, Milestone, Module, Project, ResourceNeeds

PACE_DURATIONS = {
    "intensive": "2-4 weeks",
    "casual": "8-12 weeks",
}
PACE_HOURS = {
    "intensive": 40,
    "casual": 20,
}
DEFAULT_DURATION = "4-8 weeks"
DEFAULT_HOURS = 30


def _pace_key(pace) -> str:
    return str(getattr(pace, "value", pace) or "")


def pace_duration(pace) -> str:
    return PACE_DURATIONS.get(_pace_key(pace), DEFAULT_DURATION)


def pace_hours(pace) -> int:
    return PACE_HOURS.get(_pace_key(pace), DEFAULT_HOURS)


def build_template_curriculum(topic: str, level: str, pace: str, goals: List[str]) -> Curriculum:
    """Three modules, two projects and two milestones shaped around the topic and goals"""
    goals = list(goals or [])
    first_goals = goals[:2]

    return Curriculum(
        title=f"{topic} - Project-Based Learning Path",
        description=f"A comprehensive {level} course on {topic} focusing on hands-on project development.",
        duration=pace_duration(pace),
        estimated_hours=pace_hours(pace),
        modules=[
            Module(
                id=1,
                title=f"Introduction to {topic}",
                objectives=[f"Understand core concepts of {topic}", *first_goals],
                duration="4-6 hours",
                topics=["Fundamentals", "Basic concepts", "Environment setup"],
            ),
            Module(
                id=2,
                title="Practical Application",
                objectives=["Build real-world projects", "Apply learned concepts"],
                duration="8-12 hours",
                topics=["Hands-on practice", "Project development"],
            ),
            Module(
                id=3,
                title="Advanced Topics",
                objectives=["Master advanced concepts", "Optimize solutions"],
                duration="6-8 hours",
                topics=["Advanced techniques", "Best practices"],
            ),
        ],
        projects=[
            Project(
                id=1,
                title=f"{topic} Starter Project",
                description=f"Build a foundational project using {topic}",
                skills=first_goals,
                difficulty="Beginner",
                estimated_hours=4,
            ),
            Project(
                id=2,
                title=f"Intermediate {topic} Application",
                description="Create a practical application incorporating multiple concepts",
                skills=goals,
                difficulty="Intermediate",
                estimated_hours=8,
            ),
        ],
        milestones=[
            Milestone(
                id=1,
                title="Foundation Complete",
                description="Completed basic concepts and first project",
                module_ids=[1],
            ),
            Milestone(
                id=2,
                title="Practical Skills Acquired",
                description="Built multiple projects and gained hands-on experience",
                module_ids=[2, 3],
            ),
        ],
        resource_needs=ResourceNeeds(
            # Main topic only: enrichment always searches it first
            video_topics=[topic],
            article_topics=[topic, f"{topic} guide", f"{topic} best practices"],
            practice_areas=goals,
        ),
    )


def course_summary(topic: str, level: str) -> CourseSummary:
    """Quick preview shown before a generation credit is spent"""
    return CourseSummary(
        topic=topic,
        level=level,
        estimated_modules="4-6 modules",
        estimated_projects="3-5 hands-on projects",
        credits_required=1,
        approx_duration=DEFAULT_DURATION,
    )
