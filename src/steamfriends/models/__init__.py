"""Pydantic models for steamfriends."""
