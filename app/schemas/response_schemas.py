from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.schemas.camel_base_model import CamelCaseBaseModel as BaseModel


class ListPagination(BaseModel):
    """Position of one page within a filtered student listing"""

    current_page: int = Field(..., description="1-based page number")
    total_pages: int = Field(..., description="ceil(totalCount / limit); 0 when empty")
    total_count: int = Field(..., description="Rows matching the search")
    has_next: bool
    has_prev: bool
    limit: int = Field(..., description="Page size after clamping")


class ApiResponse(BaseModel):
    """Envelope wrapped around every JSON response"""

    success: bool = Field(..., description="Whether the request was successful")
    message: str = Field(..., description="Human-readable message")
    data: Optional[Any] = Field(default=None, description="Response payload")
    error_code: Optional[str] = Field(
        default=None, description="Machine-readable error code, errors only"
    )
    errors: Optional[List[Dict[str, Any]]] = Field(
        default=None, description="Per-field error details"
    )
    pagination: Optional[ListPagination] = Field(
        default=None, description="Present on paginated listings"
    )
    meta: Optional[Dict[str, Any]] = Field(
        default=None, description="Additional metadata"
    )
    request_id: str = Field(..., description="Value of the X-Request-ID header")
    path: str = Field(..., description="Request path")
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Response timestamp (UTC)",
    )
