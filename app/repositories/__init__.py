from .student_repository import StudentRepository, UniqueViolationError

__all__ = ["StudentRepository", "UniqueViolationError"]
