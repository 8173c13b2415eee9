"""Database Infrastructure - SQLAlchemy declarative Base shared by all models.

Invariants:
    - One metadata object for the four review tables
"""
