from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class ErrorResponse(BaseModel):
    status: str = Field(default="error", description="Error status")
    message: str = Field(..., description="Error message")
    error_code: str = Field(..., description="Error code")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="Timestamp of error"
    )
    details: Optional[str] = Field(
        default=None,
        description="Detailed error information (only shown when SHOW_ERROR_DETAILS is enabled)"
    )

class HealthResponse(BaseModel):
    status: str = Field(..., description="Service health status")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="Health check timestamp"
    )
