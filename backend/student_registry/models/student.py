"""
Student model - the single entity of the registry.

Students are created by the registration form and never updated or
deleted. The roll number is the user-facing identifier; `id` is the
storage-generated key.
"""

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, func
from student_registry.database import Base


class Student(Base):
    """
    SQLAlchemy model for the student table.

    Uniqueness of roll_number is enforced by the database constraint, and
    created_at is filled in by the database at insert time.
    """
    __tablename__ = "student"
    __table_args__ = (
        UniqueConstraint("roll_number", name="uq_student_roll_number"),
    )
    # Fetch server-generated columns during the INSERT flush (RETURNING
    # where the backend has it, otherwise a SELECT before the commit)
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Storage-generated student identifier")
    roll_number = Column(String(50), nullable=False,
                         doc="User-supplied roll number, unique across students")
    name = Column(String(255), nullable=False,
                  doc="Student's full name")
    age = Column(Integer, nullable=False,
                 doc="Age in years as submitted")
    date_of_birth = Column(String(10), nullable=False,
                           doc="Date of birth as submitted (YYYY-MM-DD from the form)")
    created_at = Column(DateTime, server_default=func.now(), nullable=False,
                        doc="Timestamp set by the database when the row was inserted")

    def __repr__(self):
        return f"<Student(id={self.id}, roll_number='{self.roll_number}', name='{self.name}')>"
