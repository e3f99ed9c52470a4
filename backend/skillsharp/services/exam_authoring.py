"""Exam Authoring Service — institute exams, their question sets and enrollment.

Invariants:
    - An exam is only reachable through its own institute (404 otherwise)
    - Bank links are ordered by order_index; a new link gets the current link count
    - Custom questions always carry the exam's institute_id
    - Enrollment is idempotent per (exam, student)
"""

import logging
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.config import get_settings
from skillsharp.core.codes import generate_exam_code
from skillsharp.core.csv_import import decode_upload, ensure_importable, parse_mcq_csv
from skillsharp.core.errors import BusinessRuleError, ConflictError, ResourceNotFoundError
from skillsharp.core.exam_timing import as_utc
from skillsharp.models.attempt import ExamAnswer, ExamAttempt
from skillsharp.models.exam import ExamEnrollment, ExamMcq, InstituteExam
from skillsharp.models.institute import Institute
from skillsharp.models.mcq import InstituteMcq, Mcq
from skillsharp.models.profile import Profile
from skillsharp.schemas.content import QuestionIn
from skillsharp.schemas.exam import ExamCreate, ExamUpdate
from skillsharp.services.institutes import approved_institute_ids

logger = logging.getLogger(__name__)

_CODE_ATTEMPTS = 5


async def unique_exam_code(db: AsyncSession) -> str:
    for _ in range(_CODE_ATTEMPTS):
        code = generate_exam_code()
        taken = await db.execute(
            select(InstituteExam.id).where(InstituteExam.exam_code == code),
        )
        if taken.scalar_one_or_none() is None:
            return code
    raise ConflictError("Could not allocate an exam code", "CODE_EXHAUSTED")


async def get_exam_or_404(db: AsyncSession, exam_id: UUID) -> InstituteExam:
    exam = await db.get(InstituteExam, exam_id)
    if not exam:
        raise ResourceNotFoundError("Exam", str(exam_id))
    return exam


async def get_institute_exam(
    db: AsyncSession, institute_id: UUID, exam_id: UUID,
) -> InstituteExam:
    exam = await get_exam_or_404(db, exam_id)
    if exam.institute_id != institute_id:
        raise ResourceNotFoundError("Exam", str(exam_id))
    return exam


async def create_exam(
    db: AsyncSession, institute: Institute, body: ExamCreate, actor_id: UUID,
) -> InstituteExam:
    exam = InstituteExam(
        institute_id=institute.id,
        subject_id=body.subject_id,
        title=body.title,
        description=body.description,
        exam_code=await unique_exam_code(db),
        exam_date=body.exam_date,
        duration_minutes=body.duration_minutes or get_settings().default_exam_duration_minutes,
        opens_at=body.opens_at,
        closes_at=body.closes_at,
        created_by=actor_id,
    )
    db.add(exam)
    await db.commit()
    await db.refresh(exam)
    logger.info(
        f"Exam created: {exam.exam_code}",
        extra={"exam_id": exam.id, "institute_id": institute.id},
    )
    return exam


async def update_exam(db: AsyncSession, exam: InstituteExam, body: ExamUpdate) -> InstituteExam:
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(exam, field, value)
    if exam.opens_at and exam.closes_at and as_utc(exam.closes_at) <= as_utc(exam.opens_at):
        await db.rollback()
        raise BusinessRuleError("closes_at must be after opens_at", "INVALID_EXAM_WINDOW")
    await db.commit()
    await db.refresh(exam)
    return exam


async def delete_exam(db: AsyncSession, exam: InstituteExam) -> None:
    attempt_ids = select(ExamAttempt.id).where(ExamAttempt.exam_id == exam.id)
    await db.execute(delete(ExamAnswer).where(ExamAnswer.attempt_id.in_(attempt_ids)))
    await db.execute(delete(ExamAttempt).where(ExamAttempt.exam_id == exam.id))
    await db.execute(delete(ExamEnrollment).where(ExamEnrollment.exam_id == exam.id))
    await db.execute(delete(ExamMcq).where(ExamMcq.exam_id == exam.id))
    await db.execute(delete(InstituteMcq).where(InstituteMcq.exam_id == exam.id))
    await db.delete(exam)
    await db.commit()
    logger.info("Exam deleted", extra={"exam_id": exam.id})


async def list_exams_with_counts(db: AsyncSession, institute_id: UUID) -> list[dict]:
    enrollments = (
        select(ExamEnrollment.exam_id, func.count(ExamEnrollment.id).label("n"))
        .group_by(ExamEnrollment.exam_id)
        .subquery()
    )
    result = await db.execute(
        select(InstituteExam, func.coalesce(enrollments.c.n, 0))
        .outerjoin(enrollments, enrollments.c.exam_id == InstituteExam.id)
        .where(InstituteExam.institute_id == institute_id)
        .order_by(InstituteExam.created_at.desc()),
    )
    return [
        {"exam": exam, "enrollment_count": int(n)}
        for exam, n in result.all()
    ]


# ─── Question sets ───────────────────────────────────────────────

async def list_bank_questions(db: AsyncSession, exam_id: UUID) -> list[Mcq]:
    result = await db.execute(
        select(Mcq)
        .join(ExamMcq, ExamMcq.mcq_id == Mcq.id)
        .where(ExamMcq.exam_id == exam_id)
        .order_by(ExamMcq.order_index, ExamMcq.created_at),
    )
    return list(result.scalars().all())


async def list_custom_questions(db: AsyncSession, exam_id: UUID) -> list[InstituteMcq]:
    result = await db.execute(
        select(InstituteMcq)
        .where(InstituteMcq.exam_id == exam_id)
        .order_by(InstituteMcq.created_at, InstituteMcq.id),
    )
    return list(result.scalars().all())


async def toggle_bank_question(db: AsyncSession, exam: InstituteExam, mcq_id: UUID) -> bool:
    """Add the bank MCQ to the exam, or remove it if already linked. True when added."""
    link = (await db.execute(
        select(ExamMcq).where(ExamMcq.exam_id == exam.id, ExamMcq.mcq_id == mcq_id),
    )).scalar_one_or_none()
    if link:
        await db.delete(link)
        await db.commit()
        return False

    if not await db.get(Mcq, mcq_id):
        raise ResourceNotFoundError("MCQ", str(mcq_id))
    count = (await db.execute(
        select(func.count(ExamMcq.id)).where(ExamMcq.exam_id == exam.id),
    )).scalar_one()
    db.add(ExamMcq(exam_id=exam.id, mcq_id=mcq_id, order_index=int(count)))
    await db.commit()
    return True


async def add_custom_questions(
    db: AsyncSession, exam: InstituteExam, questions: list[QuestionIn], actor_id: UUID,
) -> list[InstituteMcq]:
    rows = [
        InstituteMcq(
            institute_id=exam.institute_id, exam_id=exam.id, created_by=actor_id,
            **q.model_dump(),
        )
        for q in questions
    ]
    db.add_all(rows)
    await db.commit()
    for row in rows:
        await db.refresh(row)
    logger.info(f"Added {len(rows)} custom questions", extra={"exam_id": exam.id})
    return rows


async def delete_custom_question(
    db: AsyncSession, exam: InstituteExam, question_id: UUID,
) -> None:
    question = await db.get(InstituteMcq, question_id)
    if not question or question.exam_id != exam.id:
        raise ResourceNotFoundError("Question", str(question_id))
    await db.execute(delete(ExamAnswer).where(ExamAnswer.institute_mcq_id == question_id))
    await db.delete(question)
    await db.commit()


async def import_exam_csv(
    db: AsyncSession, exam: InstituteExam, raw: bytes, actor_id: UUID,
) -> list[InstituteMcq]:
    rows = ensure_importable(
        parse_mcq_csv(decode_upload(raw)), get_settings().csv_import_max_rows,
    )
    return await add_custom_questions(
        db, exam, [QuestionIn(**row.as_dict()) for row in rows], actor_id,
    )


async def exam_details(db: AsyncSession, exam: InstituteExam) -> dict:
    """Question counts and every attempt with its student's profile."""
    bank_count = (await db.execute(
        select(func.count(ExamMcq.id)).where(ExamMcq.exam_id == exam.id),
    )).scalar_one()
    custom_count = (await db.execute(
        select(func.count(InstituteMcq.id)).where(InstituteMcq.exam_id == exam.id),
    )).scalar_one()
    attempts = (await db.execute(
        select(ExamAttempt, Profile)
        .join(Profile, Profile.id == ExamAttempt.student_id)
        .where(ExamAttempt.exam_id == exam.id)
        .order_by(ExamAttempt.started_at.desc()),
    )).all()
    return {
        "exam": exam,
        "bank_question_count": int(bank_count),
        "custom_question_count": int(custom_count),
        "attempts": [(a, p) for a, p in attempts],
    }


# ─── Student side ────────────────────────────────────────────────

async def list_student_exams(db: AsyncSession, student_id: UUID) -> list[dict]:
    """Active exams of approved institutes with the student's attempt, if any."""
    institute_ids = await approved_institute_ids(db, student_id)
    if not institute_ids:
        return []
    result = await db.execute(
        select(InstituteExam, Institute, ExamAttempt)
        .join(Institute, Institute.id == InstituteExam.institute_id)
        .outerjoin(
            ExamAttempt,
            (ExamAttempt.exam_id == InstituteExam.id)
            & (ExamAttempt.student_id == student_id),
        )
        .where(
            InstituteExam.institute_id.in_(institute_ids),
            InstituteExam.is_active.is_(True),
        )
        .order_by(InstituteExam.created_at.desc()),
    )
    return [
        {"exam": exam, "institute": institute, "attempt": attempt}
        for exam, institute, attempt in result.all()
    ]


async def enroll(db: AsyncSession, exam_id: UUID, student_id: UUID) -> ExamEnrollment:
    existing = (await db.execute(
        select(ExamEnrollment).where(
            ExamEnrollment.exam_id == exam_id, ExamEnrollment.student_id == student_id,
        ),
    )).scalar_one_or_none()
    if existing:
        return existing
    enrollment = ExamEnrollment(exam_id=exam_id, student_id=student_id)
    db.add(enrollment)
    await db.flush()
    return enrollment


async def enroll_by_code(
    db: AsyncSession, student_id: UUID, exam_code: str,
) -> tuple[InstituteExam, ExamEnrollment]:
    exam = (await db.execute(
        select(InstituteExam).where(InstituteExam.exam_code == exam_code),
    )).scalar_one_or_none()
    if not exam:
        raise ResourceNotFoundError("Exam", exam_code)
    enrollment = await enroll(db, exam.id, student_id)
    await db.commit()
    await db.refresh(enrollment)
    logger.info("Enrolled by exam code", extra={"user_id": student_id, "exam_id": exam.id})
    return exam, enrollment
