"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ExamId, AttemptId wrap UUIDs
    - Option letters are always stored lower-case ("a".."d")
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ExamId = NewType("ExamId", UUID)
AttemptId = NewType("AttemptId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class AppRole(str, Enum):
    """Roles a profile can hold. A profile may hold several."""
    ADMIN = "admin"
    INSTITUTE = "institute"
    CONTENT_CREATOR = "content_creator"
    STUDENT = "student"


class OptionLetter(str, Enum):
    """The four answer slots of an MCQ."""
    A = "a"
    B = "b"
    C = "c"
    D = "d"


class QuestionSource(str, Enum):
    """Where an exam question lives: shared bank (mcqs) or institute-authored (institute_mcqs)."""
    BANK = "bank"
    CUSTOM = "custom"


class PaymentMethod(str, Enum):
    EASYPAISA = "easypaisa"
    BANK = "bank"


class PaymentStatus(str, Enum):
    """Payment request lifecycle: pending -> approved | rejected (terminal)."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SessionEventType(str, Enum):
    """Change kinds on the user_sessions row, mirrored to realtime listeners."""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
