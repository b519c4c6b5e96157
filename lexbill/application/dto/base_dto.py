"""
Base DTOs for the application layer.
Provides common patterns for request/response data transfer objects.
"""

from typing import Any, Dict, Optional
from datetime import datetime, date
from pydantic import BaseModel, Field, ConfigDict, field_validator, ValidationInfo


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Convert enum values to their values
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True,
        # Reject unknown fields
        extra="forbid",
        # JSON encoders for custom types
        json_encoders={
            datetime: lambda v: v.isoformat(),
            date: lambda v: v.isoformat(),
        }
    )


class RequestDTO(BaseDTO):
    """Base class for request DTOs."""
    pass


class ResponseDTO(BaseDTO):
    """Base class for response DTOs."""

    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DateRangeRequestDTO(RequestDTO):
    """Base class for requests restricted to a date range."""

    start_date: Optional[date] = Field(default=None, description="Range start (inclusive)")
    end_date: Optional[date] = Field(default=None, description="Range end (inclusive)")

    @field_validator('end_date')
    @classmethod
    def validate_date_range(cls, v: Optional[date], info: ValidationInfo) -> Optional[date]:
        """Validate that end_date is not before start_date."""
        start = info.data.get('start_date')
        if v and start and v < start:
            raise ValueError('end_date must be after start_date')
        return v


class HealthCheckResponseDTO(BaseDTO):
    """Health check response DTO."""

    status: str = Field(description="Service status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    version: Optional[str] = Field(default=None, description="Application version")
    environment: Optional[str] = Field(default=None, description="Deployment environment")


class ErrorResponseDTO(BaseDTO):
    """Error response DTO."""

    error: str = Field(description="Error type")
    message: str = Field(description="Error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
