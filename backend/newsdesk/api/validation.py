"""
Shared validation utilities for API endpoints.
"""

from typing import List, Optional
from fastapi import HTTPException, Query

MAX_TERM_LENGTH = 100


def validate_string_length(
    value: Optional[str],
    param_name: str = "parameter",
    max_length: int = 255,
    min_length: int = 0,
) -> Optional[str]:
    """
    Validate string parameter length.

    Raises:
        HTTPException: If validation fails
    """
    if value is not None:
        if len(value) < min_length:
            raise HTTPException(
                status_code=422,
                detail=f"Invalid {param_name}: minimum length is {min_length}",
            )
        if len(value) > max_length:
            raise HTTPException(
                status_code=422,
                detail=f"Invalid {param_name}: maximum length is {max_length}",
            )
    return value


def validate_terms(
    values: Optional[List[str]], param_name: str = "parameter"
) -> Optional[List[str]]:
    """Strip blank entries from a repeated query parameter and bound each term."""
    if values is None:
        return None
    cleaned = [v.strip() for v in values if v and v.strip()]
    for value in cleaned:
        validate_string_length(value, param_name, max_length=MAX_TERM_LENGTH)
    return cleaned or None


# Query parameter dependencies for common validations
LimitParam = Query(20, ge=1, le=100, description="Maximum items to return")
SkipParam = Query(0, ge=0, le=100000, description="Number of items to skip")
SearchQueryParam = Query(
    ..., min_length=1, max_length=200, description="Text to search for"
)
MinRelevanceParam = Query(
    None, ge=0.0, le=1.0, description="Minimum base relevance score"
)
FolderParam = Query(None, min_length=1, max_length=100, description="Saved folder")
