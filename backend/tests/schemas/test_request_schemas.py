"""Request Schemas — boundary validation of auth, content, exam, payment and theme payloads.

Invariants:
    - Emails lower-cased; codes upper-cased
    - Option letters normalized to "a".."d" wherever they enter the API
    - Exam windows must close after they open
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError

from skillsharp.schemas.auth import InstituteSignupRequest, LoginRequest, SignupRequest
from skillsharp.schemas.announcement import AnnouncementUpdate
from skillsharp.schemas.content import (
    ChapterCreate, ChapterUpdate, McqBatchCreate, QuestionIn, SubjectUpdate,
)
from skillsharp.schemas.exam import EnrollByCode, ExamAnswerSubmit, ExamCreate, ExamUpdate
from skillsharp.schemas.institute import JoinInstituteRequest
from skillsharp.schemas.payment import PaymentRequestCreate
from skillsharp.schemas.practice import PracticeSubmission
from skillsharp.schemas.profile import ThemeUpdate


def _question(**overrides) -> dict:
    data = {
        "question": "Q?", "option_a": "1", "option_b": "2",
        "option_c": "3", "option_d": "4", "correct_option": "A",
    }
    data.update(overrides)
    return data


# --- Auth ---------------------------------------------------------------------

def test_signup_lowercases_email_and_uppercases_code():
    body = SignupRequest(
        email="Sara@Example.COM", password="secret123",
        full_name="  Sara  ", institute_code=" ab12cd ",
    )
    assert body.email == "sara@example.com"
    assert body.full_name == "Sara"
    assert body.institute_code == "AB12CD"


def test_signup_blank_institute_code_becomes_none():
    body = SignupRequest(
        email="s@example.com", password="secret123", full_name="S", institute_code="  ",
    )
    assert body.institute_code is None


def test_signup_rejects_short_password():
    with pytest.raises(ValidationError):
        SignupRequest(email="s@example.com", password="123", full_name="S")


def test_signup_rejects_whitespace_name():
    with pytest.raises(ValidationError):
        SignupRequest(email="s@example.com", password="secret123", full_name="   ")


def test_institute_signup_requires_two_char_name():
    with pytest.raises(ValidationError):
        InstituteSignupRequest(email="i@example.com", password="secret123", name=" x ")


def test_login_rejects_invalid_email():
    with pytest.raises(ValidationError):
        LoginRequest(email="not-an-email", password="x")


# --- Content ------------------------------------------------------------------

def test_question_correct_option_normalized():
    assert QuestionIn(**_question(correct_option="3")).correct_option == "c"


def test_question_rejects_unknown_option():
    with pytest.raises(ValidationError):
        QuestionIn(**_question(correct_option="e"))


def test_batch_requires_at_least_one_question():
    with pytest.raises(ValidationError):
        McqBatchCreate(chapter_id=uuid4(), mcqs=[])


def test_chapter_key_points_cleaned():
    chapter = ChapterCreate(subject_id=uuid4(), name="Ch", key_points=[" a ", "", "  ", "b"])
    assert chapter.key_points == ["a", "b"]


def test_content_updates_reject_null_for_required_columns():
    with pytest.raises(ValidationError, match="name cannot be null"):
        SubjectUpdate(name=None)
    with pytest.raises(ValidationError, match="is_premium cannot be null"):
        ChapterUpdate(is_premium=None)
    assert SubjectUpdate(description=None).description is None
    assert ChapterUpdate(description=None).model_fields_set == {"description"}


# --- Exams --------------------------------------------------------------------

def test_exam_window_must_close_after_open():
    now = datetime.now(timezone.utc)
    with pytest.raises(ValidationError):
        ExamCreate(title="T", opens_at=now, closes_at=now)
    with pytest.raises(ValidationError):
        ExamUpdate(opens_at=now, closes_at=now - timedelta(minutes=1))


def test_exam_duration_bounds():
    with pytest.raises(ValidationError):
        ExamCreate(title="T", duration_minutes=0)
    assert ExamCreate(title="T").duration_minutes is None


def test_exam_update_rejects_null_required_fields():
    with pytest.raises(ValidationError, match="duration_minutes cannot be null"):
        ExamUpdate(duration_minutes=None)
    assert ExamUpdate(opens_at=None, description=None).opens_at is None


def test_announcement_update_rejects_null_title():
    with pytest.raises(ValidationError, match="title cannot be null"):
        AnnouncementUpdate(title=None)
    assert AnnouncementUpdate(contact_info=None).contact_info is None


def test_enroll_code_normalized():
    assert EnrollByCode(exam_code=" abcd2345 ").exam_code == "ABCD2345"


def test_exam_answer_requires_known_source():
    with pytest.raises(ValidationError):
        ExamAnswerSubmit(question_id=uuid4(), source="web", selected_option="a")
    answer = ExamAnswerSubmit(question_id=uuid4(), source="custom", selected_option="D")
    assert answer.selected_option == "d"


def test_join_request_rejects_blank_code():
    with pytest.raises(ValidationError):
        JoinInstituteRequest(institute_code="   ")


# --- Practice / payments / themes --------------------------------------------

def test_practice_answers_normalized():
    qid = uuid4()
    body = PracticeSubmission(answers={str(qid): "B"})
    assert body.answers == {qid: "b"}


def test_payment_transaction_id_stripped_and_required():
    body = PaymentRequestCreate(transaction_id="  TX-1 ", payment_method="bank")
    assert body.transaction_id == "TX-1"
    assert body.amount is None
    with pytest.raises(ValidationError):
        PaymentRequestCreate(transaction_id="   ", payment_method="bank")


def test_payment_rejects_unknown_method_and_non_positive_amount():
    with pytest.raises(ValidationError):
        PaymentRequestCreate(transaction_id="TX", payment_method="paypal")
    with pytest.raises(ValidationError):
        PaymentRequestCreate(transaction_id="TX", payment_method="bank", amount=0)


def test_theme_update_validates_catalog():
    assert ThemeUpdate(color_theme="ocean").color_theme == "ocean"
    with pytest.raises(ValidationError):
        ThemeUpdate(bg_theme="neon")
