"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input)
    - Option letters normalized through core.scoring.normalize_option

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
