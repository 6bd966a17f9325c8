"""
Common imports and dependencies for the schedule module.

This module centralizes shared imports, dependencies and the translation of
domain errors into HTTP responses used across all schedule-related endpoints.
"""

from typing import Any, List, Optional
from datetime import date
from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status
from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.exceptions import (
    CapacityExceededError,
    DuplicateReservationError,
    InvalidRangeError,
    InvalidStatusTransitionError,
    NotFoundError,
    ScheduleError,
    ScheduleValidationError,
)
from app.db.redis_client import get_redis_client
from app.db.session import get_db
from app.models.schedule import ClassTemplate as ClassTemplateModel
from app.schemas.schedule import ClassTemplate
from app.services.occurrence import count_occurrences, occurrence_issue

ERROR_STATUS = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (CapacityExceededError, status.HTTP_409_CONFLICT),
    (DuplicateReservationError, status.HTTP_409_CONFLICT),
    (InvalidStatusTransitionError, status.HTTP_409_CONFLICT),
    (InvalidRangeError, status.HTTP_400_BAD_REQUEST),
    (ScheduleValidationError, status.HTTP_400_BAD_REQUEST),
)


def http_error(exc: ScheduleError) -> HTTPException:
    """Map a domain error to the HTTPException returned to the client."""
    for exc_type, status_code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def template_response(template: ClassTemplateModel) -> ClassTemplate:
    """Serialize a template with its occurrence estimate and data-quality flag."""
    response = ClassTemplate.model_validate(template)
    response.occurrence_count = count_occurrences(template)
    response.data_issue = occurrence_issue(template)
    return response
