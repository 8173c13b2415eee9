"""Boundary Schemas - pydantic models for values handed back to callers."""
