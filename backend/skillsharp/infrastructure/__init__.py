"""Infrastructure Layer — database manager, logging, security primitives, realtime broker.

Invariants:
    - Infrastructure never imports from services/ or api/
"""
