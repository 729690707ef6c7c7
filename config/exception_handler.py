"""
Project-wide DRF exception handler.

Every API error body is a single JSON string. Service exceptions already
carry a human readable message; serializer errors are reduced to the
first message they contain.
"""

import logging

from rest_framework.views import exception_handler


logger = logging.getLogger(__name__)


def first_error_message(data):
    """Return the first non-empty message found in a DRF error payload."""
    if isinstance(data, dict):
        for value in data.values():
            message = first_error_message(value)
            if message:
                return message
        return ''
    if isinstance(data, (list, tuple)):
        for item in data:
            message = first_error_message(item)
            if message:
                return message
        return ''
    return str(data)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        # Unhandled errors fall through to Django's 500 handling
        return None

    response.data = first_error_message(response.data)

    view = context.get('view')
    logger.info(
        "%s rejected with %s: %s",
        type(view).__name__ if view is not None else '-',
        response.status_code,
        response.data,
    )
    return response
