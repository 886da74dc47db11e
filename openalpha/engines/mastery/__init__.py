"""
Mastery Engine - quiz scores, completion markers and progress views.

A concept is mastered at a score of 80 or more. Scores never regress:
each submission keeps the best result seen so far.
"""

from openalpha.engines.mastery.ledger import AttemptResult, MasteryLedger
from openalpha.engines.mastery.summary import (
    ConceptProgress,
    ProgressReporter,
    Recommendation,
    StrugglingConcept,
    StudentAnalytics,
    SubjectSummary,
    concept_overlay,
    recommendations_for,
    subject_summaries,
)

__all__ = [
    "AttemptResult",
    "MasteryLedger",
    "ConceptProgress",
    "ProgressReporter",
    "Recommendation",
    "StrugglingConcept",
    "StudentAnalytics",
    "SubjectSummary",
    "concept_overlay",
    "recommendations_for",
    "subject_summaries",
]
