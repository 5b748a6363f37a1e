"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from learnpath.content.graph import CurriculumGraph
from learnpath.core.types import Lesson, LessonProgress, LessonStatus, Module


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


def build_graph(shape: list[int], cards_per_lesson: int = 0) -> CurriculumGraph:
    """
    Build a graph with len(shape) modules, shape[i] lessons in module i.

    Module ids are 'm1', 'm2', ...; lesson ids 'm1.1', 'm1.2', ...
    Card ids are '<lesson>-c<n>'.
    """
    modules = []
    lessons = []
    for m_idx, count in enumerate(shape, 1):
        mod_id = f"m{m_idx}"
        modules.append(Module(id=mod_id, order=m_idx, title=f"Module {m_idx}"))
        for l_idx in range(1, count + 1):
            lesson_id = f"{mod_id}.{l_idx}"
            lessons.append(
                Lesson(
                    id=lesson_id,
                    module_id=mod_id,
                    order=l_idx,
                    title=f"Lesson {lesson_id}",
                    card_ids=tuple(f"{lesson_id}-c{n}" for n in range(1, cards_per_lesson + 1)),
                )
            )
    return CurriculumGraph(modules, lessons)


def progress_of(**statuses: str) -> dict[str, LessonProgress]:
    """progress_of(m1_1="completed") -> {'m1.1': LessonProgress(...)}"""
    return {
        key.replace("_", "."): LessonProgress(lesson_id=key.replace("_", "."), status=LessonStatus(value))
        for key, value in statuses.items()
    }


@pytest.fixture
def two_by_two():
    """Two modules with two lessons each (no cards)."""
    return build_graph([2, 2])


@pytest.fixture
def sample_manifest():
    """Provide a small content manifest for testing."""
    return {
        "modules": [
            {
                "id": "networking",
                "title": "Networking Basics",
                "order": 1,
                "lessons": [
                    {"id": "osi", "order": 1, "title": "The OSI Model", "card_ids": ["osi-1", "osi-2"]},
                    {"id": "tcp", "order": 2, "title": "TCP and UDP", "card_ids": ["tcp-1"]},
                ],
            },
            {
                "id": "routing",
                "title": "Routing",
                "order": 2,
                "lessons": [
                    {"id": "static", "order": 1, "title": "Static Routes", "card_ids": ["static-1"]},
                ],
            },
        ]
    }


@pytest.fixture
def make_graph():
    """Factory fixture for build_graph."""
    return build_graph


@pytest.fixture
def make_progress():
    """Factory fixture for progress_of."""
    return progress_of
