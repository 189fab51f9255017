"""Pydantic schemas for validating user input."""
