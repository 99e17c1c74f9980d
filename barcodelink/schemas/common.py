"""
==============================================================================
Common Schemas Module
==============================================================================

Shared response schemas used across all API endpoints.

==============================================================================
"""


from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Simple message response."""
    success: bool = Field(default=True)
    message: str
