"""
Turn raw model output into curriculum data.

``parse_course_response`` never raises: text that does not decode to a JSON
object becomes the empty curriculum skeleton. ``coerce_curriculum`` then
fits whatever was decoded onto the Curriculum model, dropping values that do
not match the documented shape.
"""
import json
import math
import re
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError as PydanticValidationError

from learnpath.core.exceptions import ParseError
from learnpath.core.logging import get_logger
from learnpath.schemas import Curriculum, Milestone, Module, Project, ResourceNeeds

logger = get_logger(__name__)

_LEADING_FENCE = re.compile(r"^```[\w+-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?[ \t]*```\s*$")

DIFFICULTIES = ("Beginner", "Intermediate", "Advanced")


def empty_curriculum() -> Dict[str, Any]:
    """Minimal curriculum returned when the model output cannot be decoded"""
    return {
        "title": "Learning Path",
        "description": "Custom learning path",
        "modules": [],
        "projects": [],
        "milestones": [],
        "resourceNeeds": {
            "videoTopics": [],
            "articleTopics": [],
            "practiceAreas": [],
        },
    }


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang fence and a trailing ``` fence if present"""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
        cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _decode(text: str) -> Dict[str, Any]:
    candidate = strip_code_fences(text)
    try:
        data = json.loads(candidate)
    except (TypeError, ValueError):
        # Models sometimes wrap the object in prose; try the outermost braces
        start = candidate.find("{")
        end = candidate.rfind("}")
        if start == -1 or end <= start:
            raise ParseError("No JSON object found in model response", {"length": len(candidate)})
        try:
            data = json.loads(candidate[start:end + 1])
        except ValueError as e:
            raise ParseError(f"Invalid JSON in model response: {e}", {"length": len(candidate)}) from e

    if not isinstance(data, dict):
        raise ParseError("Model response is not a JSON object", {"type": type(data).__name__})
    return data


def parse_course_response(text: str) -> Dict[str, Any]:
    """Decode the model's curriculum JSON, falling back to the empty skeleton"""
    try:
        return _decode(text)
    except ParseError as e:
        logger.warning("Course response parsing failed", error=e.message, **e.details)
        return empty_curriculum()


# ======================= Coercion =======================

def _pick(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(round(value)) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    items = (_as_str(v) for v in value)
    return [item for item in items if item]


def _as_int_list(value: Any) -> List[int]:
    if not isinstance(value, list):
        return []
    items = (_as_int(v) for v in value)
    return [item for item in items if item is not None and item > 0]


def _as_difficulty(value: Any) -> Optional[str]:
    text = _as_str(value)
    if not text:
        return None
    text = text.capitalize()
    return text if text in DIFFICULTIES else None


def _module_fields(raw: Dict[str, Any], index: int) -> Dict[str, Any]:
    return {
        "title": _as_str(_pick(raw, "title", "name")) or f"Module {index}",
        "objectives": _as_str_list(raw.get("objectives")),
        "duration": _as_str(raw.get("duration")) or "",
        "topics": _as_str_list(raw.get("topics")),
    }


def _project_fields(raw: Dict[str, Any], index: int) -> Dict[str, Any]:
    return {
        "title": _as_str(_pick(raw, "title", "name")) or f"Project {index}",
        "description": _as_str(raw.get("description")) or "",
        "skills": _as_str_list(raw.get("skills")),
        "difficulty": _as_difficulty(raw.get("difficulty")),
        "estimated_hours": _as_int(_pick(raw, "estimatedHours", "estimated_hours")),
    }


def _milestone_fields(raw: Dict[str, Any], index: int) -> Dict[str, Any]:
    return {
        "title": _as_str(_pick(raw, "title", "name")) or f"Milestone {index}",
        "description": _as_str(raw.get("description")) or "",
        "module_ids": _as_int_list(_pick(raw, "moduleIds", "module_ids")),
    }


def _coerce_collection(
    value: Any,
    model: Type[BaseModel],
    fields: Callable[[Dict[str, Any], int], Dict[str, Any]],
) -> List[BaseModel]:
    """Keep dict items, giving each a unique positive id (bad or repeated ids get the next free one)"""
    if not isinstance(value, list):
        return []

    raw_items = [item for item in value if isinstance(item, dict)]
    used = set()
    for raw in raw_items:
        item_id = _as_int(raw.get("id"))
        if item_id is not None and item_id > 0:
            used.add(item_id)

    items = []
    seen = set()
    next_id = 1
    for index, raw in enumerate(raw_items, start=1):
        item_id = _as_int(raw.get("id"))
        if item_id is None or item_id <= 0 or item_id in seen:
            while next_id in used or next_id in seen:
                next_id += 1
            item_id = next_id
        seen.add(item_id)
        try:
            items.append(model.model_validate({"id": item_id, **fields(raw, index)}))
        except PydanticValidationError as e:
            logger.warning("Dropping invalid curriculum item",
                           model=model.__name__, index=index, errors=e.error_count())
    return items


def coerce_curriculum(data: Any) -> Curriculum:
    """Fit decoded model output onto the Curriculum schema"""
    if not isinstance(data, dict):
        return Curriculum()

    needs_raw = _pick(data, "resourceNeeds", "resource_needs")
    resource_needs = None
    if isinstance(needs_raw, dict):
        resource_needs = ResourceNeeds(
            video_topics=_as_str_list(_pick(needs_raw, "videoTopics", "video_topics")),
            article_topics=_as_str_list(_pick(needs_raw, "articleTopics", "article_topics")),
            practice_areas=_as_str_list(_pick(needs_raw, "practiceAreas", "practice_areas")),
        )

    return Curriculum(
        title=_as_str(data.get("title")) or "Learning Path",
        description=_as_str(data.get("description")) or "",
        duration=_as_str(data.get("duration")),
        estimated_hours=_as_int(_pick(data, "estimatedHours", "estimated_hours")),
        modules=_coerce_collection(data.get("modules"), Module, _module_fields),
        projects=_coerce_collection(data.get("projects"), Project, _project_fields),
        milestones=_coerce_collection(data.get("milestones"), Milestone, _milestone_fields),
        resource_needs=resource_needs,
    )
