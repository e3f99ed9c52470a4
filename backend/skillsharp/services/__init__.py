"""Services Layer — DB orchestration around the pure rules in core/.

Invariants:
    - Services take an AsyncSession and commit at the end of each public operation
    - Domain failures raised as SkillSharpError subclasses, never HTTPException
"""
