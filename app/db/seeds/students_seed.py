from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Gender, Student
from app.utils.logging import get_logger

logger = get_logger()

# (student_id, name, gender, age, major, grade, email, phone)
SAMPLE_STUDENTS = [
    ("2024001", "张三", Gender.MALE, 20, "计算机科学与技术", "大二", "zhangsan@example.com", "13800138001"),
    ("2024002", "李四", Gender.FEMALE, 19, "软件工程", "大一", "lisi@example.com", "13800138002"),
    ("2024003", "王五", Gender.MALE, 21, "信息安全", "大三", "wangwu@example.com", "13800138003"),
    ("2024004", "赵六", Gender.FEMALE, 22, "数据科学与大数据技术", "大四", "zhaoliu@example.com", "13800138004"),
    ("2024005", "钱七", Gender.MALE, 23, "人工智能", "研一", "qianqi@example.com", "13800138005"),
    ("2024006", "孙八", Gender.FEMALE, 20, "网络工程", "大二", "sunba@example.com", "13800138006"),
    ("2024007", "周九", Gender.MALE, 19, "物联网工程", "大一", "zhoujiu@example.com", "13800138007"),
    ("2024008", "吴十", Gender.FEMALE, 21, "电子信息工程", "大三", "wushi@example.com", "13800138008"),
]


async def seed_students(db_session: AsyncSession, only_if_empty: bool = False) -> int:
    """Seed sample students. Clears the table first unless `only_if_empty` is set,
    in which case a non-empty table is left untouched."""

    if only_if_empty:
        existing = (await db_session.execute(select(func.count(Student.id)))).scalar_one()
        if existing:
            logger.info(f"Found {existing} students, skipping sample data")
            return 0
    else:
        await db_session.execute(delete(Student))

    students = [
        Student(
            student_id=student_id,
            name=name,
            gender=gender,
            age=age,
            major=major,
            grade=grade,
            email=email,
            phone=phone,
        )
        for student_id, name, gender, age, major, grade, email, phone in SAMPLE_STUDENTS
    ]

    db_session.add_all(students)
    await db_session.commit()
    logger.info(f"Seeded {len(students)} students")
    return len(students)
