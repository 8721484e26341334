"""
API Schemas Package

This package contains Pydantic models for API requests and responses.
"""

from wip_planner.schemas.api.common import ActionResponse, UserSummary, WipWindowBrief

__all__ = ["ActionResponse", "UserSummary", "WipWindowBrief"]
