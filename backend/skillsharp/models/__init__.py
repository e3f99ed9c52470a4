"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Profile is the identity root; everything user-owned references profiles.id

Design Decisions:
    - All models imported here so Base.metadata is complete and string-based
      relationship() references resolve before any query runs
"""

from skillsharp.models.profile import Profile, UserRole  # noqa: F401
from skillsharp.models.user_session import UserSession  # noqa: F401
from skillsharp.models.institute import Institute, InstituteStudent  # noqa: F401
from skillsharp.models.subject import Subject  # noqa: F401
from skillsharp.models.chapter import Chapter  # noqa: F401
from skillsharp.models.mcq import Mcq, InstituteMcq  # noqa: F401
from skillsharp.models.exam import InstituteExam, ExamMcq, ExamEnrollment  # noqa: F401
from skillsharp.models.attempt import (  # noqa: F401
    TestAttempt, TestAnswer, ExamAttempt, ExamAnswer,
)
from skillsharp.models.payment import PaymentRequest  # noqa: F401
from skillsharp.models.announcement import Announcement  # noqa: F401
