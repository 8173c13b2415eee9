"""Infrastructure Layer - SQLite engine, schema stamping and logging setup.

Invariants:
    - Infrastructure never imports from services/
    - All SQLAlchemy exceptions leave this layer as ReviewDbError subclasses
"""
