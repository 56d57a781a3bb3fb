"""
schemas/common.py

- Shared schemas used across the project (Pydantic v2)
  1) Standard error response: ErrorDetail, ErrorResponse
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ConfigDict


class ErrorDetail(BaseModel):
    """Smallest unit carrying an error code and message"""
    code: str = Field(..., description="Error code (e.g. VALIDATION_ERROR, NOT_FOUND, INTERNAL_ERROR)")
    message: str = Field(..., description="Human readable error message")
    details: Dict[str, Any] = Field(default_factory=dict, description="Structured context (ids, offending values)")


class ErrorResponse(BaseModel):
    """
    Standard error body returned by the global error handlers
    - middlewares/error_handler.py returns this schema
    """
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Response generation time (UTC)"
    )
    trace_id: Optional[str] = Field(
        default=None, description="Request trace ID (copied from X-Request-ID when present)"
    )

    model_config = ConfigDict(extra="ignore")
