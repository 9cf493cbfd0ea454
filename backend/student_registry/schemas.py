"""
Pydantic schemas for form submissions and stored student records.
"""

import re
from datetime import datetime
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from student_registry.exceptions import SubmissionValidationError

REQUIRED_FIELDS = ("roll_number", "name", "age", "date_of_birth")

# Digits only; int() alone also takes "1_000" and non-ASCII digits
AGE_PATTERN = re.compile(r"^[+-]?[0-9]+\Z")
# Range of a signed 32-bit INT column (MySQL INT, PostgreSQL integer)
AGE_MIN = 0
AGE_MAX = 2 ** 31 - 1


class StudentSubmission(BaseModel):
    """A validated registration form submission."""
    roll_number: str = Field(..., description="Roll number, unique per student")
    name: str = Field(..., description="Student's full name")
    age: int = Field(..., description="Age coerced from the form text")
    date_of_birth: str = Field(..., description="Date of birth as submitted")


class StudentRecord(BaseModel):
    """A student row as read back from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    roll_number: str
    name: str
    age: int
    date_of_birth: str
    created_at: Optional[datetime] = None


def _coerce_age(text: str) -> Optional[int]:
    """
    Integer value of `text`, or None when it is not an ASCII whole number
    that fits the age column.
    """
    if not AGE_PATTERN.match(text):
        return None
    age = int(text)
    if not AGE_MIN <= age <= AGE_MAX:
        return None
    return age


def parse_submission(form: Mapping[str, str]) -> StudentSubmission:
    """
    Trim and validate the four registration fields.

    A field is missing when its trimmed text is empty. Presence of `age`
    is decided on that text, not on the coerced number, so an age of 0 is
    accepted. Raises SubmissionValidationError naming every missing field
    and every age that is not a whole number within AGE_MIN..AGE_MAX.
    """
    values = {field: str(form.get(field) or "").strip() for field in REQUIRED_FIELDS}

    missing = [field for field in REQUIRED_FIELDS if not values[field]]
    invalid = []

    age = None
    if values["age"]:
        age = _coerce_age(values["age"])
        if age is None:
            invalid.append("age")

    if missing or invalid:
        raise SubmissionValidationError(missing_fields=missing, invalid_fields=invalid)

    return StudentSubmission(
        roll_number=values["roll_number"],
        name=values["name"],
        age=age,
        date_of_birth=values["date_of_birth"],
    )
