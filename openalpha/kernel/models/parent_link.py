"""
Parent link model - invite-code lifecycle binding a parent to a student.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from openalpha.kernel.models.base import Base, generate_uuid

INVITE_CODE_LENGTH = 8


class ParentLink(Base):
    """
    Pending: parent_id and linked_at NULL, invite_code set.
    Linked: parent_id and linked_at set, invite_code NULL.

    A student has at most one pending row; invite codes are unique while set.
    Unlinking deletes the row.
    """

    __tablename__ = "parent_links"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    invite_code: Mapped[Optional[str]] = mapped_column(
        String(INVITE_CODE_LENGTH),
        unique=True,
        nullable=True,
    )
    linked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index(
            "uq_parent_links_one_pending_per_student",
            "student_id",
            unique=True,
            sqlite_where=text("parent_id IS NULL"),
            postgresql_where=text("parent_id IS NULL"),
        ),
    )
