"""
Schemas Package

This package contains Pydantic models and schemas for the application.
"""
