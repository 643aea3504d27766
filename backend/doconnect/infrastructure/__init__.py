"""Infrastructure Layer - database sessions, filesystem access, and logging setup.

Invariants:
    - Infrastructure never imports from services/
    - Driver exceptions are mapped to core/errors.py types at this boundary
"""
