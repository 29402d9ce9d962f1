from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

from .errors import DomainError, ErrorKind

logger = logging.getLogger("gigboard")


STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def custom_exception_handler(exc, context):
    """
    Wrap DRF, Django and domain exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    # Domain errors carry their own kind/code
    if isinstance(exc, DomainError):
        status_code = STATUS_BY_KIND[exc.kind]
        if exc.kind is ErrorKind.INTERNAL_ERROR:
            logger.error(f"Domain internal error: {exc}")
        return Response(
            {
                "success": False,
                "status_code": status_code,
                "errors": exc.as_dict(),
            },
            status=status_code,
        )

    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "errors": response.data,
            },
            status=response.status_code,
        )

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {
                "kind": ErrorKind.INTERNAL_ERROR.value,
                "code": "INTERNAL_ERROR",
                "detail": "Internal server error.",
            },
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
