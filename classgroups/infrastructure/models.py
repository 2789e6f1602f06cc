# classgroups/infrastructure/models.py
"""
SQLAlchemy ORM models for classes, members and their groups.
"""
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
)
from sqlalchemy.orm import relationship

from classgroups.infrastructure.db.session import Base


def now():
    return datetime.now(timezone.utc)


class Cohort(Base):
    """A class: the set of members grouped together in one run."""

    __tablename__ = "classes"

    id = Column(String(16), primary_key=True)
    name = Column(String(100), nullable=False)
    max_groups = Column(Integer, nullable=False)
    min_group_size = Column(Integer, nullable=False)
    max_group_size = Column(Integer, nullable=False)
    admin_token = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now, nullable=False, index=True)
    groups_created = Column(Boolean, default=False, nullable=False)

    # Relationships
    members = relationship("Member", back_populates="cohort", order_by="Member.seq")
    groups = relationship("Group", back_populates="cohort", order_by="Group.position")


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (
        Index("idx_members_sector", "class_id", "sector"),
        Index("idx_members_location", "class_id", "location"),
    )

    id = Column(String(16), primary_key=True)
    # registration order within the class; created_at can tie within one clock tick
    seq = Column(Integer, nullable=False, default=0)
    class_id = Column(String(16), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    location = Column(String(100), nullable=False)
    sector = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now, nullable=False)

    # Relationships
    cohort = relationship("Cohort", back_populates="members")
    group_assignments = relationship("GroupMember", back_populates="member")


class Group(Base):
    __tablename__ = "groups"
    __table_args__ = (
        UniqueConstraint("class_id", "position", name="idx_groups_class_position"),
    )

    id = Column(String(16), primary_key=True)
    class_id = Column(String(16), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now, nullable=False)

    # Relationships
    cohort = relationship("Cohort", back_populates="groups")
    members = relationship("GroupMember", back_populates="group", order_by="GroupMember.seq")


class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "member_id", name="idx_group_members_unique"),
    )

    id = Column(String(16), primary_key=True)
    # order of members inside the group
    seq = Column(Integer, nullable=False, default=0)
    group_id = Column(String(16), ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    member_id = Column(String(16), ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=now, nullable=False)

    # Relationships
    group = relationship("Group", back_populates="members")
    member = relationship("Member", back_populates="group_assignments")
