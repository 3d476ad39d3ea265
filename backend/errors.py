"""
Mapping from service exceptions to HTTP errors.
"""

import logging

from fastapi import HTTPException

from tracker.core.database import ConstraintViolationError, RecordNotFoundError
from tracker.skills.service import DuplicateSkillNameError

logger = logging.getLogger("tracker.api")


def to_http_exception(error: Exception) -> HTTPException:
    """
    Convert an exception raised by a service into an HTTPException.

    - DuplicateSkillNameError, ConstraintViolationError -> 409
    - RecordNotFoundError -> 404
    - ValueError -> 400
    - anything else -> 500
    """
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, (DuplicateSkillNameError, ConstraintViolationError)):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, RecordNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValueError):
        return HTTPException(status_code=400, detail=str(error))

    logger.exception("Unhandled error in API request")
    return HTTPException(status_code=500, detail=str(error))
