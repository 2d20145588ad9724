"""Services Layer — providers that sequence persistence calls around the pure core.

Invariants:
    - Every provider takes a ProviderContext first and keyword-only arguments after it
    - Providers raise CrudCoreError subclasses; they never build HTTP responses

Design Decisions:
    - One provider module per resource (auth, recipes, members)
    - Search execution shared in search.py; no provider builds skip/take itself
"""
