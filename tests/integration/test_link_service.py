"""Integration tests for the parent-student linking protocol."""

import asyncio
import itertools

import pytest
from sqlalchemy import func, select

from openalpha.engines.linking.link_service import LinkService, generate_invite_code
from openalpha.kernel.errors import AuthorizationError, DependencyError, NotFoundError, ValidationError
from openalpha.kernel.models.parent_link import ParentLink
from openalpha.kernel.models.user import UserRole
from openalpha.kernel.permissions.capability import CapabilityService


async def _count_links(session, **filters) -> int:
    query = select(func.count()).select_from(ParentLink)
    for column, value in filters.items():
        query = query.where(getattr(ParentLink, column) == value)
    return (await session.execute(query)).scalar_one()


class TestInviteCodes:

    def test_code_shape(self):
        code = generate_invite_code()
        assert len(code) == 8
        assert code == code.upper()
        int(code, 16)

    async def test_reissue_invalidates_previous_code(self, db_session, student, parent):
        links = LinkService(db_session)
        first = await links.issue_invite(student.id)
        second = await links.issue_invite(student.id)
        await db_session.commit()

        assert first != second
        assert await _count_links(db_session, student_id=student.id) == 1

        with pytest.raises(NotFoundError):
            await links.redeem_invite(parent.id, first)
        assert await links.redeem_invite(parent.id, second) == student.id

    async def test_collision_draws_again(self, db_session, student, user_factory):
        other_student = await user_factory(UserRole.STUDENT, grade_level=2)
        codes = itertools.chain(["AAAA1111", "AAAA1111"], itertools.repeat("BBBB2222"))
        links = LinkService(db_session, code_factory=lambda: next(codes))

        assert await links.issue_invite(student.id) == "AAAA1111"
        assert await links.issue_invite(other_student.id) == "BBBB2222"

    async def test_collisions_exhaust_to_retryable_error(self, db_session, student, user_factory):
        other_student = await user_factory(UserRole.STUDENT, grade_level=2)
        links = LinkService(db_session, code_factory=lambda: "CAFEBABE")
        await links.issue_invite(student.id)

        with pytest.raises(DependencyError) as exc_info:
            await links.issue_invite(other_student.id)
        assert exc_info.value.code == "invite_code_collision"
        assert exc_info.value.retryable is True
        # The first student's code is untouched
        assert await _count_links(db_session, invite_code="CAFEBABE") == 1

    async def test_concurrent_issue_for_one_student_keeps_one_pending_row(self, database, student):
        async def issue():
            async with database.session() as session:
                return await LinkService(session).issue_invite(student.id)

        codes = await asyncio.gather(issue(), issue())

        async with database.session() as session:
            assert await _count_links(session, student_id=student.id) == 1
            stored = (
                await session.execute(
                    select(ParentLink.invite_code).where(ParentLink.student_id == student.id)
                )
            ).scalar_one()
        assert stored in codes

    async def test_concurrent_same_code_for_two_students(self, database, student, user_factory):
        other_student = await user_factory(UserRole.STUDENT, grade_level=2)

        async def issue(student_id):
            try:
                async with database.session() as session:
                    return await LinkService(session, code_factory=lambda: "CAFEBABE").issue_invite(student_id)
            except DependencyError as exc:
                return exc.code

        outcomes = await asyncio.gather(issue(student.id), issue(other_student.id))

        assert sorted(outcomes) == ["CAFEBABE", "invite_code_collision"]
        async with database.session() as session:
            assert await _count_links(session, invite_code="CAFEBABE") == 1

    async def test_lowercase_code_is_accepted(self, db_session, student, parent):
        links = LinkService(db_session)
        code = await links.issue_invite(student.id)
        assert await links.redeem_invite(parent.id, code.lower()) == student.id


class TestRedemption:

    async def test_redeem_links_and_consumes_code(self, db_session, student, parent, other_parent):
        links = LinkService(db_session)
        code = await links.issue_invite(student.id)

        await links.redeem_invite(parent.id, code)

        assert await CapabilityService(db_session).is_linked(parent.id, student.id)
        with pytest.raises(NotFoundError):
            await links.redeem_invite(other_parent.id, code)

    async def test_unknown_code(self, db_session, parent):
        with pytest.raises(NotFoundError):
            await LinkService(db_session).redeem_invite(parent.id, "DEADBEEF")

    async def test_second_parent_needs_a_new_code(self, db_session, student, parent, other_parent):
        links = LinkService(db_session)
        await links.redeem_invite(parent.id, await links.issue_invite(student.id))
        await links.redeem_invite(other_parent.id, await links.issue_invite(student.id))

        assert [s.id for s, _ in await links.list_linked_students(parent.id)] == [student.id]
        assert [s.id for s, _ in await links.list_linked_students(other_parent.id)] == [student.id]

    async def test_already_linked(self, db_session, student, parent):
        links = LinkService(db_session)
        await links.redeem_invite(parent.id, await links.issue_invite(student.id))
        code = await links.issue_invite(student.id)

        with pytest.raises(ValidationError) as exc_info:
            await links.redeem_invite(parent.id, code)
        assert exc_info.value.code == "already_linked"

    async def test_concurrent_redemption_links_exactly_one_parent(
        self, database, db_session, student, parent, other_parent
    ):
        code = await LinkService(db_session).issue_invite(student.id)
        await db_session.commit()

        async def redeem(parent_id):
            try:
                async with database.session() as session:
                    await LinkService(session).redeem_invite(parent_id, code)
                return True
            except NotFoundError:
                return False

        outcomes = await asyncio.gather(redeem(parent.id), redeem(other_parent.id))

        assert sorted(outcomes) == [False, True]
        async with database.session() as session:
            assert await _count_links(session, student_id=student.id) == 1
            capability = CapabilityService(session)
            linked = [
                await capability.is_linked(parent.id, student.id),
                await capability.is_linked(other_parent.id, student.id),
            ]
            assert sorted(linked) == [False, True]


class TestUnlinkAndCapability:

    async def test_unlink_removes_access(self, db_session, student, parent):
        links = LinkService(db_session)
        capability = CapabilityService(db_session)
        await links.redeem_invite(parent.id, await links.issue_invite(student.id))
        assert (await capability.require_linked(parent, student.id)).id == student.id

        assert await links.unlink(parent.id, student.id) == 1
        assert await links.unlink(parent.id, student.id) == 0

        with pytest.raises(AuthorizationError):
            await capability.require_linked(parent, student.id)

    async def test_unlinked_parent_is_not_authorized(self, db_session, student, parent):
        with pytest.raises(AuthorizationError):
            await CapabilityService(db_session).require_linked(parent, student.id)

    async def test_pending_invite_grants_nothing(self, db_session, student, parent):
        await LinkService(db_session).issue_invite(student.id)
        assert not await CapabilityService(db_session).is_linked(parent.id, student.id)

    async def test_student_cannot_use_parent_capability(self, db_session, student):
        with pytest.raises(AuthorizationError):
            await CapabilityService(db_session).require_linked(student, student.id)
