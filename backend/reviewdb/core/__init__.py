"""Core Layer - identity types and the error hierarchy. No IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
"""
