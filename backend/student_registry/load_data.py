"""
Data Loader Script - registers students from a JSON file via the web form.

Reads a JSON list of student objects (roll_number, name, age,
date_of_birth) and posts each one to the insert handler, exactly as the
registration form would.

Usage:
    student-registry-load students.json                          # Uses default URL
    student-registry-load students.json http://localhost:8000    # Custom URL
"""

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import httpx

INSERT_PATH = "/insert_student"

REGISTERED = "REGISTERED"
DUPLICATE = "DUPLICATE"
INVALID = "INVALID"
ERROR = "ERROR"


@dataclass
class LoadSummary:
    """Outcome counts of one load run."""
    registered: int = 0
    duplicates: int = 0
    invalid: int = 0
    errors: int = 0
    details: List[dict] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.registered + self.duplicates + self.invalid + self.errors


def classify_response(response: httpx.Response) -> str:
    """Map a rendered insert page to an outcome."""
    if response.status_code == 400:
        return INVALID
    if response.status_code != 200:
        return ERROR
    if "Student Registered Successfully" in response.text:
        return REGISTERED
    if "Duplicate Roll Number" in response.text:
        return DUPLICATE
    return ERROR


def load_students(client: httpx.Client, students: Iterable[dict]) -> LoadSummary:
    """Post every student as a form submission and tally the outcomes."""
    summary = LoadSummary()
    for student in students:
        form = {
            key: "" if student.get(key) is None else str(student.get(key))
            for key in ("roll_number", "name", "age", "date_of_birth")
        }
        response = client.post(INSERT_PATH, data=form)
        outcome = classify_response(response)

        if outcome == REGISTERED:
            summary.registered += 1
        elif outcome == DUPLICATE:
            summary.duplicates += 1
        elif outcome == INVALID:
            summary.invalid += 1
        else:
            summary.errors += 1

        summary.details.append({
            "roll_number": form["roll_number"],
            "status": outcome,
            "http_status": response.status_code,
        })
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: student-registry-load FILE [BASE_URL]")
        return 2

    data_file = argv[0]
    base_url = argv[1] if len(argv) > 1 else os.getenv("API_URL", "http://localhost:8000")

    with open(data_file, "r", encoding="utf-8") as f:
        students = json.load(f)

    print(f"Loading {len(students)} students into {base_url}")

    with httpx.Client(base_url=base_url, timeout=30.0) as client:
        summary = load_students(client, students)

    print("=" * 50)
    print(f"Registered:  {summary.registered}")
    print(f"Duplicates:  {summary.duplicates}")
    print(f"Invalid:     {summary.invalid}")
    print(f"Errors:      {summary.errors}")
    print("=" * 50)

    return 1 if summary.errors else 0


if __name__ == "__main__":
    sys.exit(main())
