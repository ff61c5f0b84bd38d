"""
Structured API errors for hoots and comments.

Every failure leaves the API as a DRF exception rendered as ``{"detail": ...}``.
Storage errors are turned into ``PersistenceFailure`` here instead of leaking
out as an unhandled 500 page.
"""

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class HootNotFound(NotFound):
    default_detail = "Hoot not found."
    default_code = "hoot_not_found"


class CommentNotFound(NotFound):
    default_detail = "Comment not found."
    default_code = "comment_not_found"


class NotHootAuthor(PermissionDenied):
    default_detail = "You're not allowed to do that!"
    default_code = "not_hoot_author"


class PersistenceFailure(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "The request could not be saved. Please try again later."
    default_code = "persistence_failure"


def api_exception_handler(exc, context):
    """
    DRF exception handler (``REST_FRAMEWORK["EXCEPTION_HANDLER"]``).

    Database errors become a ``PersistenceFailure`` so they are reported
    apart from a missing hoot or comment; everything else is left to DRF.
    """
    if isinstance(exc, DatabaseError):
        request = context.get("request")
        logger.error(
            "Persistence failure on %s %s",
            getattr(request, "method", "-"),
            getattr(request, "path", "-"),
            exc_info=exc,
        )
        exc = PersistenceFailure()

    return exception_handler(exc, context)
