from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from ..config.database import Base

# Curriculum tables. Defined for upcoming course/subject management; no router uses them yet.

COURSE_TYPES = ("undergraduate", "postgraduate", "diploma", "certificate")
COURSE_CATEGORIES = ("engineering", "medical", "commerce", "arts", "science", "management", "law", "other")
SUBJECT_TYPES = ("core", "elective", "practical", "project")


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False, unique=True)  # upper-case
    duration = Column(Integer, nullable=False)  # years, 1..10
    type = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    eligibility = Column(Text, nullable=True)
    total_semesters = Column(Integer, nullable=False)  # 1..20
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Subject(Base):
    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("code", "course_id", name="uq_subjects_code_course"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)  # upper-case, unique per course
    course_id = Column(Integer, nullable=False, index=True)
    semester = Column(Integer, nullable=False)  # 1..20
    credits = Column(Integer, nullable=False)  # 1..10
    type = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    syllabus = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
