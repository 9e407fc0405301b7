"""DRF exception handler translating service errors into JSON responses."""
import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import ServiceError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Map ServiceError subclasses to their status code; defer everything else to DRF."""
    if isinstance(exc, ServiceError):
        if exc.status_code >= 500:
            logger.error(f'{type(exc).__name__} in {context.get("view").__class__.__name__}: {exc}')
        data = {'error': exc.message}
        if exc.details:
            data['details'] = exc.details
        return Response(data, status=exc.status_code)

    return exception_handler(exc, context)
