"""
Student Store - data access for the student table.

Wraps a SQLAlchemy session with the two statements the registry needs:
a single INSERT of a new student and a single SELECT of every student,
newest first.

Driver errors never leave this module as SQLAlchemy exceptions. They are
translated into the typed errors from student_registry.exceptions:
- DuplicateKeyError when the unique roll number constraint rejects an insert
- StorageError for everything else (connection failures, missing tables,
  other constraint violations)
"""

from typing import List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from student_registry.exceptions import DuplicateKeyError, StorageError
from student_registry.logging_config import get_logger, log_with_context
from student_registry.models.student import Student
from student_registry.schemas import StudentRecord, StudentSubmission

logger = get_logger("db")

# ──────────────────────────────────────────────────────────────
# Duplicate-key codes reported by the supported drivers
# ──────────────────────────────────────────────────────────────
POSTGRES_UNIQUE_VIOLATION = "23505"
MYSQL_DUPLICATE_ENTRY = 1062
SQLITE_UNIQUE_ERRORS = ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY")


def _error_text(exc: Exception) -> str:
    """Raw driver message, without SQLAlchemy's statement/parameter suffix."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def is_duplicate_key_error(exc: IntegrityError) -> bool:
    """
    True when `exc` is a unique/primary key violation.

    Checks, in order: the PostgreSQL SQLSTATE, the MySQL error number, the
    SQLite extended error name and finally SQLite's message text (for
    Python builds that do not expose the error name).
    """
    orig = getattr(exc, "orig", None)
    if orig is None:
        return False

    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate == POSTGRES_UNIQUE_VIOLATION:
        return True

    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True

    if getattr(orig, "sqlite_errorname", None) in SQLITE_UNIQUE_ERRORS:
        return True

    return "UNIQUE constraint failed" in str(orig)


class StudentStore:
    """Data access for students, bound to one request's session."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, submission: StudentSubmission) -> StudentRecord:
        """
        Insert one student and return it with its generated id and created_at.

        All four values are bound as statement parameters by the ORM. The
        row is complete after the flush, so nothing is read back after the
        commit.
        """
        student = Student(
            roll_number=submission.roll_number,
            name=submission.name,
            age=submission.age,
            date_of_birth=submission.date_of_birth,
        )
        try:
            self.db.add(student)
            # eager_defaults loads id and created_at during the flush,
            # so the record is complete before the commit
            self.db.flush()
            record = StudentRecord.model_validate(student)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            message = _error_text(e)
            if is_duplicate_key_error(e):
                log_with_context(logger, "WARNING", "Duplicate roll number rejected",
                                 context={"roll_number": submission.roll_number})
                raise DuplicateKeyError(message, roll_number=submission.roll_number) from e
            log_with_context(logger, "ERROR", "Insert violated a constraint: {}".format(message),
                             context={"roll_number": submission.roll_number})
            raise StorageError(message) from e
        except (SQLAlchemyError, OverflowError) as e:
            # sqlite3 raises OverflowError for integers it cannot bind; it is
            # not a DBAPI error, so SQLAlchemy does not wrap it
            self.db.rollback()
            message = _error_text(e)
            log_with_context(logger, "ERROR", "Insert failed: {}".format(message),
                             context={"roll_number": submission.roll_number})
            raise StorageError(message) from e

        log_with_context(logger, "INFO", "Inserted student {}".format(record.roll_number),
                         context={"student_id": record.id, "roll_number": record.roll_number})
        return record

    def list_all(self) -> List[StudentRecord]:
        """All students ordered by created_at descending (newest first)."""
        try:
            students = self.db.query(Student).order_by(
                Student.created_at.desc(),
                Student.id.desc()
            ).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            message = _error_text(e)
            log_with_context(logger, "ERROR", "Student listing failed: {}".format(message))
            raise StorageError(message) from e

        log_with_context(logger, "DEBUG", "Fetched {} students".format(len(students)))
        return [StudentRecord.model_validate(s) for s in students]

    def count(self) -> int:
        """Number of stored students."""
        try:
            return self.db.query(func.count(Student.id)).scalar()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(_error_text(e)) from e
