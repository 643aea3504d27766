"""Pydantic Schemas - request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Length limits mirror the ORM column limits (models/)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
