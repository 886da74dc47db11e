"""
Curriculum catalog - subjects, concepts and the prerequisite DAG per subject.

Static and read-only once built. Lookups for unknown ids return None instead
of raising; structural problems in the data are caught once, at construction.
"""

from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from openalpha.kernel.errors import CurriculumError


class Concept(BaseModel):
    """An atomic curriculum unit, gated by prerequisites and a grade band."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    prerequisites: Tuple[str, ...] = ()
    grade_level: int = 0


class Subject(BaseModel):
    """A subject and its concepts in declaration order."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    concepts: Tuple[Concept, ...] = ()


def _find_cycle(adjacency: Dict[str, FrozenSet[str]]) -> Optional[List[str]]:
    """Return one prerequisite cycle as a list of ids, or None for a DAG."""
    WHITE, GREY, BLACK = 0, 1, 2
    colour = {node: WHITE for node in adjacency}

    for root in adjacency:
        if colour[root] != WHITE:
            continue
        # Iterative DFS; path mirrors the grey nodes on the stack
        path: List[str] = [root]
        stack = [iter(sorted(adjacency[root]))]
        colour[root] = GREY
        while stack:
            child = next(stack[-1], None)
            if child is None:
                colour[path.pop()] = BLACK
                stack.pop()
                continue
            if colour[child] == GREY:
                return path[path.index(child):] + [child]
            if colour[child] == WHITE:
                colour[child] = GREY
                path.append(child)
                stack.append(iter(sorted(adjacency[child])))
    return None


class CurriculumCatalog:
    """
    Read-only view over the curriculum.

    Keeps an explicit adjacency map (concept id -> prerequisite ids) per
    subject. With ``validate=True`` (the default) construction fails on
    duplicate ids, prerequisites that point outside the subject, and cycles.
    """

    def __init__(self, subjects: Iterable[Subject], validate: bool = True):
        self._subjects: Dict[str, Subject] = {}
        self._concepts: Dict[str, Dict[str, Concept]] = {}
        self._adjacency: Dict[str, Dict[str, FrozenSet[str]]] = {}

        for subject in subjects:
            if subject.id in self._subjects:
                raise CurriculumError(f"Duplicate subject id: {subject.id}")
            self._subjects[subject.id] = subject
            by_id: Dict[str, Concept] = {}
            for concept in subject.concepts:
                if concept.id in by_id:
                    raise CurriculumError(f"Duplicate concept id in {subject.id}: {concept.id}")
                by_id[concept.id] = concept
            self._concepts[subject.id] = by_id
            self._adjacency[subject.id] = {
                c.id: frozenset(c.prerequisites) for c in subject.concepts
            }

        if validate:
            self.validate()

    def validate(self) -> None:
        """Raise CurriculumError unless every subject's prerequisites form a DAG."""
        for subject_id, adjacency in self._adjacency.items():
            for concept_id, prereqs in adjacency.items():
                unknown = sorted(p for p in prereqs if p not in adjacency)
                if unknown:
                    raise CurriculumError(
                        f"{subject_id}/{concept_id} has unknown prerequisites: {', '.join(unknown)}"
                    )
            cycle = _find_cycle(adjacency)
            if cycle:
                raise CurriculumError(
                    f"Prerequisite cycle in {subject_id}: {' -> '.join(cycle)}"
                )

    # ── Lookups ──

    @property
    def subjects(self) -> List[Subject]:
        return list(self._subjects.values())

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        return self._subjects.get(subject_id)

    def get_concept(self, subject_id: str, concept_id: str) -> Optional[Concept]:
        return self._concepts.get(subject_id, {}).get(concept_id)

    def get_concepts_for_grade(self, subject_id: str, grade_level: int) -> List[Concept]:
        """
        Every concept with grade_level <= grade, in catalog order.

        Lower grade bands stay in the list so students can review them.
        """
        subject = self._subjects.get(subject_id)
        if subject is None:
            return []
        return [c for c in subject.concepts if c.grade_level <= grade_level]

    def concept_name(self, subject_id: str, concept_id: str) -> str:
        """Display name, falling back to the raw id for retired concepts."""
        concept = self.get_concept(subject_id, concept_id)
        return concept.name if concept else concept_id


def load_default_catalog() -> CurriculumCatalog:
    """Build the bundled K-12 math, reading and science catalog."""
    from openalpha.pedagogy.curriculum_data import DEFAULT_SUBJECTS

    return CurriculumCatalog(DEFAULT_SUBJECTS)
