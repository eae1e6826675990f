"""Pydantic v2 schemas for engine results."""
