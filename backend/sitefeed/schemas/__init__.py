"""Pydantic Schemas — request/response contracts for API endpoints.

Invariants:
    - Schemas validate at system boundary (webhook bodies, API responses)
    - CMS record validation happens in core/content_schema.py before a
      record is turned into a typed schema

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
