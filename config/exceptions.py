import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from schools.exceptions import PlatformError

logger = logging.getLogger(__name__)


def platform_exception_handler(exc, context):
    """Render service errors as ``{"success": false, "code", "message", ...}``; defer the rest to DRF."""
    if isinstance(exc, PlatformError):
        view = context.get("view")
        logger.info(
            "Request rejected: %s",
            exc.code,
            extra={"view": type(view).__name__ if view else None, "status": exc.status_code},
        )
        return Response(exc.as_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None and isinstance(response.data, dict):
        response.data.setdefault("success", False)
    return response
