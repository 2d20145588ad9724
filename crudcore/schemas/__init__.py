"""Pydantic Schemas — request/response contracts for providers and routes.

Invariants:
    - Schemas validate at the system boundary (request bodies)
    - Response DTOs are produced by ResponseMapper, not by response models

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
