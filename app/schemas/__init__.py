"""
Schemas Module
==============

This module provides Pydantic models for request validation.
"""

from app.schemas.auth import LoginRequest
from app.schemas.common import RequestModel
from app.schemas.parking import ReportSubmitRequest, SpotUpdateRequest

__all__ = [
    "LoginRequest",
    "ReportSubmitRequest",
    "RequestModel",
    "SpotUpdateRequest",
]
