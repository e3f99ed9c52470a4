"""Practice Routes — chapter tests, grading, progress and the premium gate.

Invariants:
    - Questions never expose correct_option before submission
    - Skipped questions count toward total, never toward score
    - Premium chapters answer 402 without an active premium window
    - Content managers bypass the premium gate
"""

from datetime import datetime, timedelta, timezone

import pytest

from sqlalchemy import select

from skillsharp.models.chapter import Chapter
from skillsharp.models.mcq import Mcq
from skillsharp.models.subject import Subject


@pytest.fixture
async def bank(test_db, make_user):
    """A subject with a free and a premium chapter, four MCQs each."""
    author = await make_user("author@example.com", "content_creator")
    subject = Subject(name="Physics", created_by=author.id)
    test_db.add(subject)
    await test_db.flush()
    free = Chapter(subject_id=subject.id, name="Motion", created_by=author.id, order_index=1)
    premium = Chapter(
        subject_id=subject.id, name="Optics", created_by=author.id,
        order_index=2, is_premium=True,
    )
    test_db.add_all([free, premium])
    await test_db.flush()
    mcqs = [
        Mcq(
            chapter_id=chapter.id, created_by=author.id, question=f"{chapter.name} Q{i}",
            option_a="w", option_b="x", option_c="y", option_d="z",
            correct_option=letter, explanation=f"Because {letter}",
        )
        for chapter in (free, premium)
        for i, letter in enumerate("abcd")
    ]
    test_db.add_all(mcqs)
    await test_db.commit()
    return {
        "free": free,
        "premium": premium,
        "mcqs": [m for m in mcqs if m.chapter_id == free.id],
    }


async def test_questions_hide_answers(client, student, bank):
    res = await client.get(
        f"/api/v1/practice/chapters/{bank['free'].id}/questions", headers=student.headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert len(body["questions"]) == 4
    for q in body["questions"]:
        assert "correct_option" not in q
        assert "explanation" not in q


async def test_empty_chapter_has_no_questions(client, student, test_db, bank):
    empty = Chapter(subject_id=bank["free"].subject_id, name="Empty", created_by=bank["free"].created_by)
    test_db.add(empty)
    await test_db.commit()
    res = await client.get(
        f"/api/v1/practice/chapters/{empty.id}/questions", headers=student.headers,
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "NO_QUESTIONS"


async def test_check_answer(client, student, bank):
    mcq = bank["mcqs"][1]
    right = await client.post(
        "/api/v1/practice/check",
        json={"mcq_id": str(mcq.id), "selected_option": "B"}, headers=student.headers,
    )
    assert right.json() == {"is_correct": True}
    wrong = await client.post(
        "/api/v1/practice/check",
        json={"mcq_id": str(mcq.id), "selected_option": "a"}, headers=student.headers,
    )
    assert wrong.json() == {"is_correct": False}


async def test_submit_grades_with_skips(client, student, bank):
    a, b, c, _ = bank["mcqs"]
    res = await client.post(
        f"/api/v1/practice/chapters/{bank['free'].id}/submit",
        json={"answers": {str(a.id): "a", str(b.id): "b", str(c.id): "d"}},
        headers=student.headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["score"] == 2
    assert body["total_questions"] == 4
    assert body["percentage"] == 50.0
    assert body["passed"] is False

    review = {r["id"]: r for r in body["review"]}
    assert review[str(c.id)]["correct_option"] == "c"
    assert review[str(c.id)]["is_correct"] is False
    skipped = [r for r in body["review"] if r["skipped"]]
    assert len(skipped) == 1
    assert skipped[0]["selected_option"] is None


async def test_passing_submission(client, student, bank):
    answers = {str(m.id): m.correct_option for m in bank["mcqs"][:3]}
    res = await client.post(
        f"/api/v1/practice/chapters/{bank['free'].id}/submit",
        json={"answers": answers}, headers=student.headers,
    )
    assert res.json()["percentage"] == 75.0
    assert res.json()["passed"] is True


async def test_progress_and_reset(client, student, bank):
    chapter_id = str(bank["free"].id)
    first = bank["mcqs"][0]
    await client.post(
        f"/api/v1/practice/chapters/{chapter_id}/submit",
        json={"answers": {}}, headers=student.headers,
    )
    await client.post(
        f"/api/v1/practice/chapters/{chapter_id}/submit",
        json={"answers": {str(first.id): "a"}}, headers=student.headers,
    )

    res = await client.get("/api/v1/practice/progress", headers=student.headers)
    body = res.json()
    progress = body["chapters"][chapter_id]
    assert progress["attempts_count"] == 2
    assert progress["latest_score"] == 25.0
    assert progress["best_score"] == 25.0
    assert progress["average_score"] == 12.5
    assert body["total_attempts"] == 2

    attempts = await client.get(
        f"/api/v1/practice/attempts?chapter_id={chapter_id}", headers=student.headers,
    )
    assert len(attempts.json()["attempts"]) == 2

    reset = await client.delete(
        f"/api/v1/practice/chapters/{chapter_id}/progress", headers=student.headers,
    )
    assert reset.json() == {"deleted": 2}
    res = await client.get("/api/v1/practice/progress", headers=student.headers)
    assert res.json()["chapters"] == {}
    assert res.json()["overall_average"] == 0.0


# ─── Premium gate ───────────────────────────────────────────────

async def test_premium_chapter_requires_premium(client, student, bank):
    res = await client.get(
        f"/api/v1/practice/chapters/{bank['premium'].id}/questions", headers=student.headers,
    )
    assert res.status_code == 402
    assert res.json()["error"]["code"] == "PREMIUM_REQUIRED"


async def test_active_premium_unlocks_chapter(client, student, bank, test_db):
    student.profile.premium_until = datetime.now(timezone.utc) + timedelta(days=3)
    test_db.add(student.profile)
    await test_db.commit()

    res = await client.get(
        f"/api/v1/practice/chapters/{bank['premium'].id}/questions", headers=student.headers,
    )
    assert res.status_code == 200


async def test_expired_premium_is_locked(client, student, bank, test_db):
    student.profile.premium_until = datetime.now(timezone.utc) - timedelta(minutes=1)
    test_db.add(student.profile)
    await test_db.commit()

    res = await client.get(
        f"/api/v1/practice/chapters/{bank['premium'].id}/questions", headers=student.headers,
    )
    assert res.status_code == 402


async def test_content_creator_bypasses_premium(client, creator, bank):
    res = await client.get(
        f"/api/v1/practice/chapters/{bank['premium'].id}/questions", headers=creator.headers,
    )
    assert res.status_code == 200


async def test_check_answer_respects_premium_gate(client, student, creator, bank, test_db):
    result = await test_db.execute(select(Mcq).where(Mcq.chapter_id == bank["premium"].id))
    locked = result.scalars().first()
    payload = {"mcq_id": str(locked.id), "selected_option": locked.correct_option}

    res = await client.post("/api/v1/practice/check", json=payload, headers=student.headers)
    assert res.status_code == 402
    assert res.json()["error"]["code"] == "PREMIUM_REQUIRED"

    res = await client.post("/api/v1/practice/check", json=payload, headers=creator.headers)
    assert res.json() == {"is_correct": True}
