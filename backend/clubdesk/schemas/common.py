"""
Common schemas shared across modules.
"""
from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""
    code: int
    message: str


class MessageResponse(BaseModel):
    message: str
