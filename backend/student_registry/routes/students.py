"""
Student routes - the registration form, the insert handler and the listing.

Endpoints:
- GET  /                 registration form
- POST /insert_student   validate, insert one student, render the outcome
- GET  /insert_student   redirect to the form (nothing was submitted)
- GET  /view_students    table of all students, newest first

Both handlers are single-pass: every outcome, including storage failures,
ends in a rendered HTML page.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from student_registry.database import get_db
from student_registry.exceptions import DuplicateKeyError, StorageError, SubmissionValidationError
from student_registry.logging_config import get_logger, log_with_context
from student_registry.schemas import parse_submission
from student_registry.services.student_store import StudentStore

router = APIRouter()
logger = get_logger("registration")

# Jinja2Templates enables autoescaping, so every value is HTML-escaped
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

FIELD_LABELS = {
    "roll_number": "Roll Number",
    "name": "Name",
    "age": "Age",
    "date_of_birth": "Date of Birth",
}


def get_store(db: Session = Depends(get_db)) -> StudentStore:
    return StudentStore(db)


@router.get("/", response_class=HTMLResponse)
def student_form(request: Request):
    """Registration form posting to /insert_student."""
    return templates.TemplateResponse(request, "student_form.html", {})


@router.api_route("/insert_student", methods=["GET", "HEAD"])
def insert_student_redirect(request: Request):
    """The insert handler was reached without a submission; go to the form."""
    return RedirectResponse(request.app.state.settings.form_url,
                            status_code=status.HTTP_303_SEE_OTHER)


@router.post("/insert_student", response_class=HTMLResponse)
def insert_student(
    request: Request,
    roll_number: str = Form(""),
    name: str = Form(""),
    age: str = Form(""),
    date_of_birth: str = Form(""),
    store: StudentStore = Depends(get_store)
):
    """
    Register a student from the submitted form.

    Outcomes:
    - missing/invalid fields: error page, 400, nothing written
    - success: confirmation page with the generated id and submitted values
    - duplicate roll number: dedicated error page
    - any other storage error: generic error page with the escaped message
    """
    form = {
        "roll_number": roll_number,
        "name": name,
        "age": age,
        "date_of_birth": date_of_birth,
    }

    try:
        submission = parse_submission(form)
    except SubmissionValidationError as e:
        log_with_context(logger, "WARNING", "Rejected submission: {}".format(e),
                         extra_data={"missing": e.missing_fields, "invalid": e.invalid_fields})
        return templates.TemplateResponse(
            request, "message.html",
            {
                "title": "Error: All fields are required!" if e.missing_fields else "Error: Invalid input",
                "missing": [FIELD_LABELS[f] for f in e.missing_fields],
                "invalid": [FIELD_LABELS[f] for f in e.invalid_fields],
            },
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        student = store.insert(submission)
    except DuplicateKeyError as e:
        return templates.TemplateResponse(
            request, "message.html",
            {"title": "Error: Duplicate Roll Number", "roll_number": e.roll_number},
        )
    except StorageError as e:
        return templates.TemplateResponse(
            request, "message.html",
            {
                "title": "Database Error",
                "summary": "An error occurred while inserting data into the database.",
                "error_details": e.message,
            },
        )

    log_with_context(logger, "INFO", "Student registered",
                     context={"student_id": student.id, "roll_number": student.roll_number})
    return templates.TemplateResponse(request, "insert_success.html", {"student": student})


@router.get("/view_students", response_class=HTMLResponse)
def view_students(request: Request, store: StudentStore = Depends(get_store)):
    """All student records, most recently registered first."""
    try:
        students = store.list_all()
    except StorageError as e:
        return templates.TemplateResponse(
            request, "view_students.html", {"students": [], "error": e.message}
        )

    return templates.TemplateResponse(
        request, "view_students.html", {"students": students, "error": None}
    )
