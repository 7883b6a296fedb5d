"""Mapping of error codes to HTTP responses"""
from typing import Optional
from fastapi import HTTPException, status
from app.domain.errors import BAD_INPUT_CODES, FORBIDDEN_CODES, NOT_FOUND_CODES, ErrorCode


def http_status_for(error_code: Optional[ErrorCode]) -> int:
    """404 for missing entities, 400 for malformed requests, 403 for the wrong actor, 409 otherwise"""
    if error_code in NOT_FOUND_CODES:
        return status.HTTP_404_NOT_FOUND
    if error_code in BAD_INPUT_CODES:
        return status.HTTP_400_BAD_REQUEST
    if error_code in FORBIDDEN_CODES:
        return status.HTTP_403_FORBIDDEN
    return status.HTTP_409_CONFLICT


def raise_for_failure(result) -> None:
    """Raise HTTPException for an unsuccessful *ResultDTO; the body keeps the error code"""
    if result.success:
        return
    raise HTTPException(
        status_code=http_status_for(result.error_code),
        detail=result.model_dump(mode="json", exclude_none=True),
    )
