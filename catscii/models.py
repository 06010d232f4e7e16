"""
Pydantic models for API response schemas.

All models use camelCase for JSON serialization.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelCaseModel(BaseModel):
    """
    Base model that converts snake_case to camelCase for JSON serialization.

    This ensures API responses read naturally to JS clients
    (e.g., cache_state → cacheState).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class HealthResponse(CamelCaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    cache_state: Literal["empty", "fetching", "cached", "expired"]
    art_age_seconds: Optional[float] = None
    upstream_fetches: int = 0
