"""SkillSharp Application Package — MCQ practice, institute exams, premium access.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
