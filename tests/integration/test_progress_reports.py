"""Integration tests for aggregate progress views."""

from datetime import datetime, timedelta, timezone

from openalpha.engines.mastery.ledger import MasteryLedger
from openalpha.engines.mastery.summary import (
    ProgressReporter,
    concept_overlay,
    recommendations_for,
    subject_summaries,
)
from openalpha.engines.sessions.session_store import SessionStore
from openalpha.kernel.models.chat_session import SessionType
from openalpha.pedagogy.recommendation import ConceptStatus


async def reply(transcript):
    return "Let's count together."


class TestSummaries:

    async def test_subject_summaries(self, db_session, student, catalog):
        ledger = MasteryLedger(db_session)
        await ledger.record_attempt(student.id, "math", "math-counting", 90)
        await ledger.record_attempt(student.id, "math", "math-addition-basic", 50)

        summaries = {s.subject_id: s for s in subject_summaries(catalog, await ledger.list_records(student.id))}

        math = summaries["math"]
        assert (math.completed, math.in_progress) == (1, 1)
        assert math.not_started == math.total_concepts - 2
        assert math.percent_complete == round(100 / math.total_concepts)
        assert summaries["science"].completed == 0
        assert summaries["science"].not_started == summaries["science"].total_concepts

    async def test_concept_overlay(self, db_session, student, catalog):
        ledger = MasteryLedger(db_session)
        await ledger.record_attempt(student.id, "math", "math-counting", 80)

        overlay = concept_overlay(catalog, "math", 1, await ledger.list_records(student.id, "math"))
        by_id = {c.id: c for c in overlay}

        assert list(by_id) == ["math-counting", "math-addition-basic", "math-subtraction-basic"]
        assert by_id["math-counting"].status == ConceptStatus.COMPLETED
        assert by_id["math-counting"].completed is True
        assert by_id["math-addition-basic"].unlocked is True
        assert by_id["math-addition-basic"].status == ConceptStatus.NOT_STARTED

    async def test_recommendations(self, db_session, student, catalog):
        ledger = MasteryLedger(db_session)
        await ledger.record_attempt(student.id, "math", "math-counting", 60)

        recs = recommendations_for(catalog, await ledger.list_records(student.id))

        assert [(r.type, r.subject_id) for r in recs] == [
            ("continue", "math"),
            ("start", "reading"),
            ("start", "science"),
        ]
        assert recs[0].reason == "60% mastery - almost there!"
        assert recs[1].concept_id == "read-alphabet"


class TestProgressReporter:

    async def test_analytics(self, db_session, student, catalog):
        now = datetime.now(timezone.utc)
        ledger = MasteryLedger(db_session)
        for score in (30, 45):
            await ledger.record_attempt(student.id, "math", "math-counting", score)

        for clock in (lambda: now, lambda: now - timedelta(days=30)):
            store = SessionStore(db_session, clock=clock)
            chat = await store.get_or_create_session(
                student.id, SessionType.TUTOR, subject="math", concept_id="math-counting"
            )
            await store.run_turn(chat, "how do I count to ten?", reply)

        analytics = await ProgressReporter(db_session, catalog).analytics(student.id)

        assert len(analytics.recent_activity) == 1
        assert analytics.last_active is not None
        assert [s.concept_name for s in analytics.struggling] == ["Counting Numbers"]
        assert analytics.struggling[0].subject_name == "Mathematics"
        assert analytics.recommendations[0].type == "continue"

    async def test_empty_student(self, db_session, student, catalog):
        reporter = ProgressReporter(db_session, catalog)
        analytics = await reporter.analytics(student.id)
        assert analytics.last_active is None
        assert analytics.recent_activity == []
        assert len(analytics.recommendations) == 3
        assert all(s.completed == 0 for s in await reporter.summary(student.id))
