"""Exam Routes — authoring, student attempts and analytics over HTTP.

Invariants:
    - Exams are only reachable through the owning institute (404 for anyone else)
    - Toggling a bank question twice leaves it unlinked
    - Open attempts never reveal correct options; resume returns saved answers
    - A submitted attempt is final (409 on restart)
    - Only approved members may start an exam
"""

import pytest

from skillsharp.models.chapter import Chapter
from skillsharp.models.institute import InstituteStudent
from skillsharp.models.mcq import Mcq
from skillsharp.models.subject import Subject

from conftest import DEFAULT_PASSWORD

CSV_HEADER = "question,option_a,option_b,option_c,option_d,correct_option,explanation\n"


def _custom(text, correct) -> dict:
    return {
        "question": text, "option_a": "w", "option_b": "x",
        "option_c": "y", "option_d": "z", "correct_option": correct,
    }


@pytest.fixture
async def bank_mcq(test_db, make_user) -> Mcq:
    author = await make_user("bank@example.com", "admin")
    subject = Subject(name="Chemistry", created_by=author.id)
    test_db.add(subject)
    await test_db.flush()
    chapter = Chapter(subject_id=subject.id, name="Atoms", created_by=author.id)
    test_db.add(chapter)
    await test_db.flush()
    mcq = Mcq(
        chapter_id=chapter.id, created_by=author.id, question="Bank question",
        option_a="p", option_b="q", option_c="r", option_d="s", correct_option="c",
    )
    test_db.add(mcq)
    await test_db.commit()
    return mcq


@pytest.fixture
async def approved_student(student, institute, test_db):
    test_db.add(InstituteStudent(
        institute_id=institute.id, student_id=student.id, is_approved=True,
    ))
    await test_db.commit()
    return student


@pytest.fixture
async def exam(client, institute_owner, bank_mcq) -> dict:
    """An exam with one bank question and two custom questions."""
    res = await client.post(
        "/api/v1/exams", json={"title": "Midterm"}, headers=institute_owner.headers,
    )
    assert res.status_code == 201, res.text
    exam = res.json()
    await client.post(
        f"/api/v1/exams/{exam['id']}/bank-questions/{bank_mcq.id}",
        headers=institute_owner.headers,
    )
    await client.post(
        f"/api/v1/exams/{exam['id']}/custom-questions",
        json={"questions": [_custom("Custom one", "a"), _custom("Custom two", "b")]},
        headers=institute_owner.headers,
    )
    return exam


# ─── Authoring ───────────────────────────────────────────────────

async def test_create_exam_defaults(client, institute_owner):
    res = await client.post(
        "/api/v1/exams", json={"title": "Quiz"}, headers=institute_owner.headers,
    )
    body = res.json()
    assert body["duration_minutes"] == 30
    assert len(body["exam_code"]) == 8
    assert body["is_active"] is True


async def test_exam_questions_listing(client, institute_owner, exam):
    res = await client.get(
        f"/api/v1/exams/{exam['id']}/questions", headers=institute_owner.headers,
    )
    body = res.json()
    assert body["total"] == 3
    assert body["bank"][0]["correct_option"] == "c"
    assert {q["question"] for q in body["custom"]} == {"Custom one", "Custom two"}


async def test_toggle_bank_question_twice_unlinks(client, institute_owner, exam, bank_mcq):
    url = f"/api/v1/exams/{exam['id']}/bank-questions/{bank_mcq.id}"
    res = await client.post(url, headers=institute_owner.headers)
    assert res.json()["selected"] is False
    res = await client.post(url, headers=institute_owner.headers)
    assert res.json()["selected"] is True


async def test_custom_question_csv_import(client, institute_owner, exam):
    csv_text = CSV_HEADER + "Imported,a,b,c,d,C,\n"
    res = await client.post(
        f"/api/v1/exams/{exam['id']}/custom-questions/import",
        files={"file": ("exam.csv", csv_text.encode("utf-8"), "text/csv")},
        headers=institute_owner.headers,
    )
    assert res.status_code == 201, res.text
    assert res.json()["questions"][0]["correct_option"] == "c"


async def test_delete_custom_question(client, institute_owner, exam):
    listing = await client.get(
        f"/api/v1/exams/{exam['id']}/questions", headers=institute_owner.headers,
    )
    qid = listing.json()["custom"][0]["id"]
    res = await client.delete(
        f"/api/v1/exams/{exam['id']}/custom-questions/{qid}", headers=institute_owner.headers,
    )
    assert res.status_code == 204
    listing = await client.get(
        f"/api/v1/exams/{exam['id']}/questions", headers=institute_owner.headers,
    )
    assert listing.json()["total"] == 2


async def test_other_institute_gets_404(client, exam, login):
    await client.post(
        "/api/v1/auth/institute-signup",
        json={"name": "Rival Prep", "email": "rival@example.com", "password": DEFAULT_PASSWORD},
    )
    rival = await login("rival@example.com")
    res = await client.get(f"/api/v1/exams/{exam['id']}", headers=rival)
    assert res.status_code == 404


async def test_update_exam_window_validated(client, institute_owner, exam):
    res = await client.patch(
        f"/api/v1/exams/{exam['id']}",
        json={"opens_at": "2026-01-02T10:00:00Z", "closes_at": "2026-01-01T10:00:00Z"},
        headers=institute_owner.headers,
    )
    assert res.status_code == 400

    res = await client.patch(
        f"/api/v1/exams/{exam['id']}",
        json={"duration_minutes": 45, "title": "Final"}, headers=institute_owner.headers,
    )
    assert res.json()["duration_minutes"] == 45
    assert res.json()["title"] == "Final"


async def test_update_exam_rejects_null_duration(client, institute_owner, exam):
    res = await client.patch(
        f"/api/v1/exams/{exam['id']}",
        json={"duration_minutes": None}, headers=institute_owner.headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"

    detail = await client.get(f"/api/v1/exams/{exam['id']}", headers=institute_owner.headers)
    assert detail.json()["duration_minutes"] == 30


async def test_delete_exam(client, institute_owner, exam):
    res = await client.delete(f"/api/v1/exams/{exam['id']}", headers=institute_owner.headers)
    assert res.status_code == 204
    listing = await client.get("/api/v1/exams", headers=institute_owner.headers)
    assert listing.json()["exams"] == []


# ─── Student attempts ───────────────────────────────────────────

async def test_unapproved_student_cannot_start(client, student, exam):
    res = await client.post(
        f"/api/v1/student/exams/{exam['id']}/start", headers=student.headers,
    )
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "NOT_APPROVED"


async def test_student_exam_list_shows_institute_exams(client, approved_student, exam):
    res = await client.get("/api/v1/student/exams", headers=approved_student.headers)
    [row] = res.json()["exams"]
    assert row["id"] == exam["id"]
    assert row["institute"]["name"] == "Bright Academy"
    assert row["attempt"] is None


async def test_enroll_by_code(client, student, exam):
    res = await client.post(
        "/api/v1/student/exams/enroll",
        json={"exam_code": exam["exam_code"].lower()}, headers=student.headers,
    )
    assert res.status_code == 200
    assert res.json()["exam"]["id"] == exam["id"]

    again = await client.post(
        "/api/v1/student/exams/enroll",
        json={"exam_code": exam["exam_code"]}, headers=student.headers,
    )
    assert again.status_code == 200

    missing = await client.post(
        "/api/v1/student/exams/enroll",
        json={"exam_code": "NOPE2345"}, headers=student.headers,
    )
    assert missing.status_code == 404


async def test_full_attempt_lifecycle(client, approved_student, institute_owner, exam, bank_mcq):
    headers = approved_student.headers
    start = await client.post(f"/api/v1/student/exams/{exam['id']}/start", headers=headers)
    assert start.status_code == 200, start.text
    state = start.json()
    assert state["remaining_seconds"] > 29 * 60
    assert [q["source"] for q in state["questions"]] == ["bank", "custom", "custom"]
    assert all("correct_option" not in q for q in state["questions"])
    assert state["answers"] == {}

    attempt_id = state["attempt"]["id"]
    custom = {q["question"]: q["id"] for q in state["questions"] if q["source"] == "custom"}
    answers = [
        (str(bank_mcq.id), "bank", "C"),
        (custom["Custom one"], "custom", "d"),
        (custom["Custom one"], "custom", "a"),
    ]
    for qid, source, option in answers:
        res = await client.put(
            f"/api/v1/student/exams/attempts/{attempt_id}/answers",
            json={"question_id": qid, "source": source, "selected_option": option},
            headers=headers,
        )
        assert res.status_code == 200, res.text

    resumed = await client.post(f"/api/v1/student/exams/{exam['id']}/start", headers=headers)
    assert resumed.json()["attempt"]["id"] == attempt_id
    assert resumed.json()["answers"] == {str(bank_mcq.id): "c", custom["Custom one"]: "a"}

    submitted = await client.post(
        f"/api/v1/student/exams/attempts/{attempt_id}/submit", headers=headers,
    )
    body = submitted.json()
    assert body["is_submitted"] is True
    assert body["auto_submitted"] is False
    assert body["score"] == 2
    assert body["total_questions"] == 3
    assert round(body["percentage"], 2) == 66.67

    again = await client.post(f"/api/v1/student/exams/{exam['id']}/start", headers=headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "EXAM_ALREADY_SUBMITTED"

    late = await client.put(
        f"/api/v1/student/exams/attempts/{attempt_id}/answers",
        json={"question_id": str(bank_mcq.id), "source": "bank", "selected_option": "a"},
        headers=headers,
    )
    assert late.status_code == 409


async def test_answer_with_wrong_source_is_404(client, approved_student, exam, bank_mcq):
    start = await client.post(
        f"/api/v1/student/exams/{exam['id']}/start", headers=approved_student.headers,
    )
    attempt_id = start.json()["attempt"]["id"]
    res = await client.put(
        f"/api/v1/student/exams/attempts/{attempt_id}/answers",
        json={"question_id": str(bank_mcq.id), "source": "custom", "selected_option": "a"},
        headers=approved_student.headers,
    )
    assert res.status_code == 404


async def test_inactive_exam_cannot_start(client, approved_student, institute_owner, exam):
    await client.patch(
        f"/api/v1/exams/{exam['id']}", json={"is_active": False},
        headers=institute_owner.headers,
    )
    res = await client.post(
        f"/api/v1/student/exams/{exam['id']}/start", headers=approved_student.headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "EXAM_INACTIVE"


# ─── Analytics ───────────────────────────────────────────────────

async def test_analytics_after_submission(
    client, approved_student, institute_owner, exam, bank_mcq,
):
    headers = approved_student.headers
    start = await client.post(f"/api/v1/student/exams/{exam['id']}/start", headers=headers)
    attempt_id = start.json()["attempt"]["id"]
    await client.put(
        f"/api/v1/student/exams/attempts/{attempt_id}/answers",
        json={"question_id": str(bank_mcq.id), "source": "bank", "selected_option": "a"},
        headers=headers,
    )
    await client.post(f"/api/v1/student/exams/attempts/{attempt_id}/submit", headers=headers)

    students = await client.get(
        f"/api/v1/exams/{exam['id']}/analytics/students", headers=institute_owner.headers,
    )
    report = students.json()
    assert report["total_submissions"] == 1
    assert report["students"][0]["email"] == "student@example.com"
    assert report["students"][0]["score"] == 0
    assert report["average_percentage"] == 0.0

    questions = await client.get(
        f"/api/v1/exams/{exam['id']}/analytics/questions", headers=institute_owner.headers,
    )
    [stat] = questions.json()["questions"]
    assert stat["question"] == "Bank question"
    assert stat["wrong_count"] == 1
    assert stat["success_rate"] == 0.0

    review = await client.get(
        f"/api/v1/exams/{exam['id']}/analytics/attempts/{attempt_id}",
        headers=institute_owner.headers,
    )
    body = review.json()
    assert len(body["questions"]) == 3
    bank_row = body["questions"][0]
    assert bank_row["correct_option"] == "c"
    assert bank_row["selected_option"] == "a"
    assert body["questions"][1]["selected_option"] is None

    detail = await client.get(f"/api/v1/exams/{exam['id']}", headers=institute_owner.headers)
    assert detail.json()["bank_question_count"] == 1
    assert detail.json()["custom_question_count"] == 2
    assert detail.json()["attempts"][0]["student"]["email"] == "student@example.com"
