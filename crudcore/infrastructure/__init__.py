"""Infrastructure Layer — database access, token signing, password hashing, logging.

Invariants:
    - SQLAlchemy exceptions never leave this layer untranslated
    - Secrets arrive through constructors, never read from the environment here
"""
