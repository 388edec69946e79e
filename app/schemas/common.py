"""
Common Schemas
==============

Shared base for request bodies.
"""

from pydantic import BaseModel, ConfigDict


class RequestModel(BaseModel):
    """Base for request schemas: trims strings, ignores unknown fields."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", populate_by_name=True)
