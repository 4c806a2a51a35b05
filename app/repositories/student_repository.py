"""
Student repository.

The persistence collaborator behind the student service. Every mutation commits on
its own so a failed insert inside a bulk import only discards that row.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Student

SEARCHABLE_COLUMNS = (Student.name, Student.student_id, Student.major, Student.grade)

GROUPABLE_COLUMNS = {
    "gender": Student.gender,
    "major": Student.major,
    "grade": Student.grade,
}


class UniqueViolationError(Exception):
    """Raised when a write collides with the unique student ID index."""

    def __init__(self, student_id: Optional[str], message: str):
        super().__init__(message)
        self.student_id = student_id
        self.message = message


class StudentRepository:
    """Async data access for the students table."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def find_by_id(self, pk: int) -> Optional[Student]:
        return await self.db.get(Student, pk)

    async def find_one(self, **filters: Any) -> Optional[Student]:
        """Return the first student whose columns equal every given filter."""
        stmt = select(Student).filter_by(**filters).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_page(
        self,
        search: str = "",
        order_by: Optional[Sequence[Any]] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Student], int]:
        """
        Fetch one page of students and the total number of matches.

        Args:
            search: Case-insensitive substring matched against name, student ID,
                major and grade (OR-combined). Empty matches everything.
            order_by: Column expressions; defaults to newest first.
            limit: Page size.
            offset: Rows to skip.

        Returns:
            (students on this page, total matching rows)
        """
        conditions = []
        if search:
            conditions.append(
                or_(
                    *(
                        column.icontains(search, autoescape=True)
                        for column in SEARCHABLE_COLUMNS
                    )
                )
            )

        count_stmt = select(func.count(Student.id)).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar_one()

        stmt = (
            select(Student)
            .where(*conditions)
            .order_by(*(order_by or (Student.created_at.desc(), Student.id.desc())))
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def insert(self, data: Dict[str, Any]) -> Student:
        student = Student(**data)
        self.db.add(student)
        await self._commit(data.get("student_id"))
        await self.db.refresh(student)
        return student

    async def update(self, pk: int, patch: Dict[str, Any]) -> Optional[Student]:
        student = await self.find_by_id(pk)
        if student is None:
            return None

        for field, value in patch.items():
            setattr(student, field, value)

        await self._commit(patch.get("student_id"))
        await self.db.refresh(student)
        return student

    async def delete(self, pk: int) -> None:
        await self.db.execute(delete(Student).where(Student.id == pk))
        await self.db.commit()

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(Student.id)))
        return result.scalar_one()

    async def group_count(
        self,
        field: str,
        order_by_count: bool = False,
        limit: Optional[int] = None,
    ) -> List[Tuple[Any, int]]:
        """Count students per distinct value of `field`, ordered by value unless
        `order_by_count` asks for the largest groups first."""
        column = GROUPABLE_COLUMNS[field]
        count_column = func.count(Student.id).label("count")

        stmt = select(column, count_column).group_by(column)
        if order_by_count:
            stmt = stmt.order_by(count_column.desc(), column.asc())
        else:
            stmt = stmt.order_by(column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return [(value, count) for value, count in result.all()]

    async def _commit(self, student_id: Optional[str]) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            # The only constraint a validated record can break is the unique index
            raise UniqueViolationError(student_id, str(e.orig)) from e
        except SQLAlchemyError:
            await self.db.rollback()
            raise
