"""Schemas shared by every router."""
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error response."""

    success: bool = False
    error: str
