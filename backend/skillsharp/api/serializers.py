"""Response Builders — ORM rows → JSON-ready dicts shared across route modules.

Invariants:
    - UUIDs and datetimes rendered as strings
    - Question payloads include correct_option only when reveal=True
"""

from datetime import datetime, timezone

from skillsharp.core.premium import is_premium_active
from skillsharp.core.roles import resolve_primary_role
from skillsharp.models.announcement import Announcement
from skillsharp.models.attempt import ExamAttempt, TestAttempt
from skillsharp.models.chapter import Chapter
from skillsharp.models.exam import InstituteExam
from skillsharp.models.institute import Institute, InstituteStudent
from skillsharp.models.mcq import QuestionFields
from skillsharp.models.payment import PaymentRequest
from skillsharp.models.profile import Profile
from skillsharp.models.subject import Subject


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def profile_dict(profile: Profile) -> dict:
    now = datetime.now(timezone.utc)
    return {
        "id": str(profile.id),
        "email": profile.email,
        "full_name": profile.full_name,
        "mobile_number": profile.mobile_number,
        "is_active": profile.is_active,
        "roles": sorted(profile.role_names),
        "role": resolve_primary_role(profile.role_names).value,
        "is_premium": is_premium_active(profile.premium_until, now),
        "premium_until": iso(profile.premium_until),
        "color_theme": profile.color_theme,
        "bg_theme": profile.bg_theme,
        "created_at": iso(profile.created_at),
    }


def profile_brief(profile: Profile) -> dict:
    return {
        "id": str(profile.id),
        "full_name": profile.full_name,
        "email": profile.email,
        "mobile_number": profile.mobile_number,
    }


def subject_dict(subject: Subject, chapter_count: int | None = None) -> dict:
    data = {
        "id": str(subject.id),
        "name": subject.name,
        "description": subject.description,
        "created_at": iso(subject.created_at),
    }
    if chapter_count is not None:
        data["chapter_count"] = chapter_count
    return data


def chapter_dict(chapter: Chapter, mcq_count: int | None = None) -> dict:
    data = {
        "id": str(chapter.id),
        "subject_id": str(chapter.subject_id),
        "name": chapter.name,
        "description": chapter.description,
        "key_points": chapter.key_points or [],
        "order_index": chapter.order_index,
        "is_premium": chapter.is_premium,
        "created_at": iso(chapter.created_at),
    }
    if mcq_count is not None:
        data["mcq_count"] = mcq_count
        data["is_locked"] = mcq_count == 0
    return data


def question_dict(question: QuestionFields, reveal: bool = False, **extra) -> dict:
    data = {
        "id": str(question.id),
        "question": question.question,
        "option_a": question.option_a,
        "option_b": question.option_b,
        "option_c": question.option_c,
        "option_d": question.option_d,
    }
    if reveal:
        data["correct_option"] = question.correct_option
        data["explanation"] = question.explanation
    data.update(extra)
    return data


def institute_dict(institute: Institute) -> dict:
    return {
        "id": str(institute.id),
        "name": institute.name,
        "email": institute.email,
        "institute_code": institute.institute_code,
        "is_active": institute.is_active,
        "created_at": iso(institute.created_at),
    }


def membership_dict(membership: InstituteStudent) -> dict:
    return {
        "id": str(membership.id),
        "institute_id": str(membership.institute_id),
        "student_id": str(membership.student_id),
        "is_approved": membership.is_approved,
        "joined_at": iso(membership.joined_at),
    }


def exam_dict(exam: InstituteExam) -> dict:
    return {
        "id": str(exam.id),
        "institute_id": str(exam.institute_id),
        "subject_id": str(exam.subject_id) if exam.subject_id else None,
        "title": exam.title,
        "description": exam.description,
        "exam_code": exam.exam_code,
        "exam_date": iso(exam.exam_date),
        "duration_minutes": exam.duration_minutes,
        "opens_at": iso(exam.opens_at),
        "closes_at": iso(exam.closes_at),
        "is_active": exam.is_active,
        "created_at": iso(exam.created_at),
    }


def exam_attempt_dict(attempt: ExamAttempt) -> dict:
    return {
        "id": str(attempt.id),
        "exam_id": str(attempt.exam_id),
        "student_id": str(attempt.student_id),
        "total_questions": attempt.total_questions,
        "score": attempt.score,
        "percentage": attempt.percentage,
        "is_submitted": attempt.is_submitted,
        "auto_submitted": attempt.auto_submitted,
        "started_at": iso(attempt.started_at),
        "completed_at": iso(attempt.completed_at),
    }


def practice_attempt_dict(attempt: TestAttempt) -> dict:
    return {
        "id": str(attempt.id),
        "chapter_id": str(attempt.chapter_id),
        "score": attempt.score,
        "total_questions": attempt.total_questions,
        "percentage": attempt.percentage,
        "started_at": iso(attempt.started_at),
        "completed_at": iso(attempt.completed_at),
    }


def payment_dict(request: PaymentRequest) -> dict:
    return {
        "id": str(request.id),
        "user_id": str(request.user_id),
        "transaction_id": request.transaction_id,
        "payment_method": request.payment_method,
        "amount": request.amount,
        "status": request.status,
        "reviewed_by": str(request.reviewed_by) if request.reviewed_by else None,
        "reviewed_at": iso(request.reviewed_at),
        "created_at": iso(request.created_at),
    }


def announcement_dict(announcement: Announcement) -> dict:
    return {
        "id": str(announcement.id),
        "title": announcement.title,
        "message": announcement.message,
        "contact_info": announcement.contact_info,
        "is_active": announcement.is_active,
        "created_at": iso(announcement.created_at),
    }
