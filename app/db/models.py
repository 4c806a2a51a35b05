from datetime import datetime
from typing import Optional
from sqlalchemy import (
    String,
    Integer,
    Enum,
    Index,
    func,
    DateTime,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
import enum


class Base(DeclarativeBase):
    pass


# Enums
class Gender(enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


# Base model with common audit fields
class AuditMixin:
    """Mixin for common audit fields"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


# Models
class Student(Base, AuditMixin):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    gender: Mapped[Gender] = mapped_column(
        Enum(Gender, name="gender"), nullable=False
    )
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    major: Mapped[str] = mapped_column(String(100), nullable=False)
    grade: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(11), nullable=True)

    __table_args__ = (
        Index("ix_students_student_id", "student_id", unique=True),
        Index("ix_students_name", "name"),
        Index("ix_students_major", "major"),
        Index("ix_students_grade", "grade"),
        Index("ix_students_created_at", "created_at"),
        # AUTOINCREMENT so ids of deleted rows are never handed out again
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"Student(id={self.id}, student_id={self.student_id!r}, name={self.name!r})"
