"""
Recommendation engine - picks the next learnable concept.

Pure functions over a catalog and a snapshot of the student's mastered set.
"""

from enum import Enum
from typing import AbstractSet, Optional

from openalpha.kernel.models.mastery import MASTERY_THRESHOLD
from openalpha.pedagogy.catalog import Concept, CurriculumCatalog


class ConceptStatus(str, Enum):
    """Display state of a concept for one student."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def is_unlocked(concept: Concept, completed_ids: AbstractSet[str]) -> bool:
    return all(p in completed_ids for p in concept.prerequisites)


def next_concept(
    catalog: CurriculumCatalog,
    subject_id: str,
    completed_ids: AbstractSet[str],
    grade_level: int,
) -> Optional[Concept]:
    """
    First concept in catalog order, at or below ``grade_level``, that is not
    completed and whose prerequisites are all completed.

    None means the grade-appropriate curriculum is exhausted or blocked on a
    prerequisite above the grade band. A partially scored concept is treated
    like an unattempted one.
    """
    for concept in catalog.get_concepts_for_grade(subject_id, grade_level):
        if concept.id in completed_ids:
            continue
        if is_unlocked(concept, completed_ids):
            return concept
    return None


def concept_status(mastery_score: Optional[int]) -> ConceptStatus:
    """Map a mastery score (None = never attempted) to its display state."""
    if mastery_score is None or mastery_score <= 0:
        return ConceptStatus.NOT_STARTED
    if mastery_score >= MASTERY_THRESHOLD:
        return ConceptStatus.COMPLETED
    return ConceptStatus.IN_PROGRESS
