"""
Content manifest loader.

A manifest is a JSON document listing modules, their lessons and the review
card ids each lesson defines:

    {
      "modules": [
        {"id": "mod-1", "title": "Foundations", "order": 1,
         "lessons": [{"id": "1.1", "order": 1, "card_ids": ["1.1-a"]}]}
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from learnpath.content.graph import CurriculumGraph
from learnpath.core.errors import CurriculumError
from learnpath.core.types import Lesson, Module


class ManifestLesson(BaseModel):
    """Lesson entry in a content manifest."""

    id: str = Field(..., min_length=1)
    order: int
    title: str = ""
    estimated_minutes: int = Field(default=15, ge=0)
    card_ids: list[str] = Field(default_factory=list)


class ManifestModule(BaseModel):
    """Module entry in a content manifest."""

    id: str = Field(..., min_length=1)
    order: int
    title: str = ""
    lessons: list[ManifestLesson] = Field(default_factory=list)


class ContentManifest(BaseModel):
    """Root of a content manifest."""

    modules: list[ManifestModule] = Field(default_factory=list)

    def to_graph(self) -> CurriculumGraph:
        """Build the validated curriculum graph."""
        modules = [
            Module(
                id=mod.id,
                order=mod.order,
                title=mod.title,
                lesson_ids=tuple(lesson.id for lesson in mod.lessons),
            )
            for mod in self.modules
        ]
        lessons = [
            Lesson(
                id=lesson.id,
                module_id=mod.id,
                order=lesson.order,
                title=lesson.title,
                estimated_minutes=lesson.estimated_minutes,
                card_ids=tuple(lesson.card_ids),
            )
            for mod in self.modules
            for lesson in mod.lessons
        ]
        return CurriculumGraph(modules, lessons)


def parse_manifest(data: dict) -> CurriculumGraph:
    """Validate a manifest mapping and build its graph."""
    try:
        manifest = ContentManifest.model_validate(data)
    except ValidationError as e:
        raise CurriculumError(f"Invalid content manifest: {e}") from e
    return manifest.to_graph()


def load_manifest(path: Path | str) -> CurriculumGraph:
    """
    Load a content manifest file.

    Args:
        path: Path to a JSON manifest

    Returns:
        CurriculumGraph built from the manifest

    Raises:
        FileNotFoundError: If the manifest does not exist
        CurriculumError: If the manifest is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Content manifest not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CurriculumError(f"Content manifest {path} is not valid JSON: {e}") from e

    graph = parse_manifest(data)
    logger.info(f"Loaded content manifest {path.name}: {graph.total_lesson_count()} lessons")
    return graph
