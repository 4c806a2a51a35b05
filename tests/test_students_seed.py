import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.seeds.students_seed import SAMPLE_STUDENTS, seed_students
from app.repositories.student_repository import StudentRepository
from app.validators import validate_student


class TestStudentsSeed:
    def test_sample_students_pass_validation(self):
        for student_id, name, gender, age, major, grade, email, phone in SAMPLE_STUDENTS:
            result = validate_student(
                {
                    "student_id": student_id,
                    "name": name,
                    "gender": gender,
                    "age": age,
                    "major": major,
                    "grade": grade,
                    "email": email,
                    "phone": phone,
                }
            )
            assert result.is_valid, (student_id, result.errors)

    @pytest.mark.asyncio
    async def test_seed_empty_table(
        self, db_session: AsyncSession, student_repository: StudentRepository
    ):
        created = await seed_students(db_session)

        assert created == len(SAMPLE_STUDENTS)
        assert await student_repository.count() == len(SAMPLE_STUDENTS)

    @pytest.mark.asyncio
    async def test_only_if_empty_keeps_existing_rows(
        self, db_session: AsyncSession, existing_student, student_repository
    ):
        created = await seed_students(db_session, only_if_empty=True)

        assert created == 0
        assert await student_repository.count() == 1

    @pytest.mark.asyncio
    async def test_reseed_replaces_rows(
        self, db_session: AsyncSession, existing_student, student_repository
    ):
        await seed_students(db_session)

        assert await student_repository.count() == len(SAMPLE_STUDENTS)
        assert await student_repository.find_one(student_id="EXIST001") is None
