from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(..., pattern=r"^(healthy|unhealthy)$")
    service: str
    version: Optional[str] = None
    environment: Optional[str] = None
    checks: Optional[Dict[str, Any]] = None
