"""Core Layer — pure query building, response mapping and error types.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from the imperative shell (services/, infrastructure/)
"""
