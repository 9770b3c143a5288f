"""
Standardized API response models.
Provides consistent response formatting across all endpoints.
"""

from typing import Optional, Any
from pydantic import BaseModel, Field
from datetime import datetime, timezone


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ErrorDetail(BaseModel):
    """Detailed error information"""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    details: Optional[Any] = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standardized error response"""

    success: bool = Field(False, description="Always false for errors")
    error: ErrorDetail = Field(..., description="Error details")
    timestamp: datetime = Field(default_factory=_now, description="Error timestamp")


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: Optional[str] = Field(None, description="Service version")
    timestamp: datetime = Field(default_factory=_now, description="Check timestamp")


# Documented on routes that run the plan state machine
PLAN_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid date, address or empty selection"},
    404: {"model": ErrorResponse, "description": "Unknown session or product"},
    409: {"model": ErrorResponse, "description": "Step not allowed at the plan's current stage"},
}
