# /home/dork/editorialdesk/newsdesk/exceptions.py
"""
Workflow errors + the DRF exception handler.

Every /api/ error leaves as {"error": <label>, "message": <text>} with the
status the exception carries. Validation errors add "details".

Nothing from rest_framework.views is imported at module level: that module
reads DEFAULT_PERMISSION_CLASSES on import, which loads newsdesk.permissions,
which imports this module.
"""

from __future__ import annotations

import logging

from rest_framework import exceptions, status

logger = logging.getLogger("newsdesk.exceptions")


class WorkflowError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Workflow error"
    default_detail = "The request could not be completed."


class NotFound(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"
    default_detail = "No such record."


class InvalidTransition(WorkflowError):
    status_code = status.HTTP_409_CONFLICT
    error = "Invalid transition"
    default_detail = "The record is not in a state that allows this."


class UpstreamFailure(WorkflowError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error = "Upstream failure"
    default_detail = "An upstream service failed."


class DashboardKeyRequired(exceptions.APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "A valid X-Dashboard-Key header is required."


def _label(exc: exceptions.APIException) -> str:
    if isinstance(exc, WorkflowError):
        return exc.error
    if isinstance(exc, exceptions.ValidationError):
        return "Invalid input"
    if isinstance(exc, (DashboardKeyRequired, exceptions.NotAuthenticated)):
        return "Unauthorized"
    if isinstance(exc, exceptions.MethodNotAllowed):
        return "Method not allowed"
    if isinstance(exc, exceptions.UnsupportedMediaType):
        return "Unsupported media type"
    if isinstance(exc, exceptions.ParseError):
        return "Invalid JSON"
    return exc.__class__.__name__


def editorial_exception_handler(exc, context):
    """Render API exceptions as {error, message}; anything else propagates as a 500."""
    from rest_framework.views import exception_handler

    response = exception_handler(exc, context)
    if response is None:
        return None

    payload = {"error": _label(exc)}
    if isinstance(exc, exceptions.ValidationError):
        payload["message"] = "Request body failed validation."
        payload["details"] = response.data
    else:
        payload["message"] = str(getattr(exc, "detail", "") or exc)

    if response.status_code >= 500:
        view = context.get("view")
        logger.error("[newsdesk] %s in %s: %s", payload["error"], view.__class__.__name__ if view else "-",
                     payload["message"])
    response.data = payload
    return response
