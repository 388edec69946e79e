"""
Parking Schemas
===============

Request schemas for parking-slot and problem-report endpoints.
Field-level business rules (plate format, vehicle types, required report
fields) live in the services so their messages stay user-facing.
"""

from pydantic import Field

from app.schemas.common import RequestModel


class SpotUpdateRequest(RequestModel):
    """Request schema for occupying or releasing a slot."""

    slot_id: str = Field(..., min_length=1, max_length=20, description="Slot number, e.g. P01")
    status: str = Field(..., description="occupied or available")
    plate_number: str | None = Field(default=None, description="Required when occupying")
    park_time: str | None = Field(default=None, description="ISO-8601 arrival time; defaults to now")
    vehicle_type: str | None = Field(default=None, description="Car, Motorcycle, Van or Others")


class ReportSubmitRequest(RequestModel):
    """Request schema for a visitor problem report."""

    category: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=2000)
    name: str | None = Field(default=None, max_length=150, description="Reporter name")
    plate: str | None = Field(default=None, max_length=15, description="Plate of the vehicle concerned")
