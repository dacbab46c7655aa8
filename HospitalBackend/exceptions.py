import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class NotFound(APIException):
    """
    A referenced entity id does not resolve.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found'
    default_code = 'not_found'


class InvalidInput(APIException):
    """
    Missing required field, value outside its enum or an illegal status transition.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input'
    default_code = 'invalid'


class Unauthorized(APIException):
    """
    The caller's identity does not match the owner of the resource.
    """
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Not authorized to access this resource'
    default_code = 'unauthorized'


def _first_message(detail):
    # walks nested serializer errors down to the first readable string
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _first_message(value)
            if field == 'non_field_errors':
                return message
            return f"{field}: {message}"
        return ''
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    """
    Reshapes every error into the {success: false, message} envelope.
    Unhandled exceptions become 500 with the raw message echoed back.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}", exc_info=exc)
        return Response(
            {'success': False, 'message': str(exc)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    payload = {'success': False, 'message': _first_message(response.data.get('detail', response.data)
                                                            if isinstance(response.data, dict) else response.data)}
    if isinstance(exc, ValidationError):
        payload['errors'] = response.data
    response.data = payload
    return response
