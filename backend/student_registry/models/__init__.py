from student_registry.models.student import Student

__all__ = ["Student"]
