"""
Content Graph.

Read-only view of the curriculum: ordered modules, each with an ordered list
of lessons, plus the review card ids each lesson defines. Only identity and
order metadata lives here; lesson prose is loaded elsewhere.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from loguru import logger

from learnpath.core.errors import CurriculumError, UnknownLessonError
from learnpath.core.types import Lesson, Module


class CurriculumGraph:
    """
    Ordered modules and lessons.

    Curriculum order is the concatenation of modules by ascending `order`,
    lessons by ascending `order` within each module. Duplicate ids, duplicate
    order values and dangling module references are rejected at build time.
    """

    def __init__(self, modules: Iterable[Module], lessons: Iterable[Lesson]):
        modules = list(modules)
        lessons = list(lessons)

        self._modules: dict[str, Module] = {}
        seen_orders: dict[int, str] = {}
        for mod in modules:
            if mod.id in self._modules:
                raise CurriculumError(f"Duplicate module id: {mod.id!r}")
            if mod.order in seen_orders:
                raise CurriculumError(
                    f"Modules {seen_orders[mod.order]!r} and {mod.id!r} share order {mod.order}"
                )
            seen_orders[mod.order] = mod.id
            self._modules[mod.id] = mod

        self._lessons: dict[str, Lesson] = {}
        by_module: dict[str, list[Lesson]] = {mod_id: [] for mod_id in self._modules}
        for lesson in lessons:
            if lesson.id in self._lessons:
                raise CurriculumError(f"Duplicate lesson id: {lesson.id!r}")
            if lesson.module_id not in self._modules:
                raise CurriculumError(
                    f"Lesson {lesson.id!r} references unknown module {lesson.module_id!r}"
                )
            self._lessons[lesson.id] = lesson
            by_module[lesson.module_id].append(lesson)

        self._by_module: dict[str, tuple[Lesson, ...]] = {}
        for mod_id, mod_lessons in by_module.items():
            mod_lessons.sort(key=lambda l: l.order)
            for prev, cur in zip(mod_lessons, mod_lessons[1:]):
                if prev.order == cur.order:
                    raise CurriculumError(
                        f"Lessons {prev.id!r} and {cur.id!r} in module {mod_id!r} share order {cur.order}"
                    )
            declared = self._modules[mod_id].lesson_ids
            if declared and set(declared) != {l.id for l in mod_lessons}:
                raise CurriculumError(
                    f"Module {mod_id!r} lesson_ids do not match the lessons that reference it"
                )
            self._by_module[mod_id] = tuple(mod_lessons)

        self._ordered_modules = tuple(sorted(self._modules.values(), key=lambda m: m.order))
        self._sequence = tuple(
            lesson for mod in self._ordered_modules for lesson in self._by_module[mod.id]
        )
        self._position = {lesson.id: idx for idx, lesson in enumerate(self._sequence)}
        card_owner: dict[str, str] = {}
        for lesson in self._sequence:
            for card_id in lesson.card_ids:
                if card_id in card_owner:
                    raise CurriculumError(
                        f"Card {card_id!r} defined by both {card_owner[card_id]!r} and {lesson.id!r}"
                    )
                card_owner[card_id] = lesson.id
        self._card_ids = frozenset(card_owner)

        logger.debug(
            f"CurriculumGraph built: {len(self._ordered_modules)} modules, "
            f"{len(self._sequence)} lessons, {len(self._card_ids)} cards"
        )

    # =========================================================================
    # Modules
    # =========================================================================

    def ordered_modules(self) -> tuple[Module, ...]:
        """Modules in ascending order."""
        return self._ordered_modules

    def module(self, module_id: str) -> Module | None:
        """Look up a module by id."""
        return self._modules.get(module_id)

    def module_for_lesson(self, lesson_id: str) -> Module | None:
        """Get the module that a given lesson belongs to."""
        lesson = self._lessons.get(lesson_id)
        if lesson is None:
            return None
        return self._modules[lesson.module_id]

    # =========================================================================
    # Lessons
    # =========================================================================

    def lessons_for_module(self, module_id: str) -> tuple[Lesson, ...]:
        """Lessons of a module ordered by `order`; empty for unknown modules."""
        return self._by_module.get(module_id, ())

    def lesson(self, lesson_id: str) -> Lesson | None:
        """Look up a lesson by id."""
        return self._lessons.get(lesson_id)

    def has_lesson(self, lesson_id: str) -> bool:
        """Check whether a lesson id exists in the content graph."""
        return lesson_id in self._lessons

    def curriculum_order(self) -> Iterator[Lesson]:
        """Every lesson exactly once, in curriculum order."""
        return iter(self._sequence)

    def next_lesson(self, lesson_id: str) -> Lesson | None:
        """Next lesson in curriculum order, crossing module boundaries."""
        idx = self._index_of(lesson_id)
        if idx + 1 >= len(self._sequence):
            return None
        return self._sequence[idx + 1]

    def previous_lesson(self, lesson_id: str) -> Lesson | None:
        """Previous lesson in curriculum order, crossing module boundaries."""
        idx = self._index_of(lesson_id)
        if idx == 0:
            return None
        return self._sequence[idx - 1]

    def _index_of(self, lesson_id: str) -> int:
        try:
            return self._position[lesson_id]
        except KeyError:
            raise UnknownLessonError(lesson_id) from None

    # =========================================================================
    # Aggregates
    # =========================================================================

    def total_lesson_count(self) -> int:
        """Count lessons across all modules."""
        return len(self._sequence)

    def total_card_count(self) -> int:
        """Count review cards defined by content across all lessons."""
        return len(self._card_ids)

    def card_ids(self) -> frozenset[str]:
        """Every review card id defined by content."""
        return self._card_ids

    def __len__(self) -> int:
        return len(self._sequence)

    def __repr__(self) -> str:
        return f"<CurriculumGraph modules={len(self._ordered_modules)} lessons={len(self._sequence)}>"
