"""
Pydantic schemas for the generic record endpoints.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


RESERVED_QUERY_PARAMS = frozenset({"order_by", "limit", "offset", "hard_delete"})


class RecordQuery(BaseModel):
    """Listing options. Everything else in the query string is an equality filter."""
    filters: Dict[str, Any] = Field(default_factory=dict)
    order_by: Optional[str] = Field(None, max_length=100, description="Column to sort ascending by")
    limit: Optional[int] = Field(None, ge=1, le=1000)
    offset: Optional[int] = Field(None, ge=0)


class RecordPayload(BaseModel):
    """Column values for create/update. Unknown columns are dropped by the access layer."""
    model_config = {"extra": "allow"}

    def values(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})
