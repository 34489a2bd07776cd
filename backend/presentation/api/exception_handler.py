import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.db.models.deletion import ProtectedError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from domain.shared.exceptions import (
    AuthorizationException,
    BusinessRuleViolationException,
    ConcurrencyException,
    DomainException,
    EntityAlreadyExistsException,
    EntityNotFoundException,
    ExternalServiceException,
    InvalidOperationException,
    StatusTransitionException,
    ValidationException,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins
DOMAIN_STATUS = (
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (EntityAlreadyExistsException, status.HTTP_409_CONFLICT),
    (ConcurrencyException, status.HTTP_409_CONFLICT),
    (AuthorizationException, status.HTTP_403_FORBIDDEN),
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (StatusTransitionException, status.HTTP_400_BAD_REQUEST),
    (InvalidOperationException, status.HTTP_400_BAD_REQUEST),
    (BusinessRuleViolationException, status.HTTP_400_BAD_REQUEST),
    (ExternalServiceException, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def _domain_response(exc: DomainException) -> Response:
    code = status.HTTP_400_BAD_REQUEST
    for exc_class, exc_status in DOMAIN_STATUS:
        if isinstance(exc, exc_class):
            code = exc_status
            break

    headers = None
    if isinstance(exc, ExternalServiceException) and exc.retry_after:
        code = status.HTTP_429_TOO_MANY_REQUESTS
        headers = {'Retry-After': str(exc.retry_after)}

    if code >= 500:
        logger.error(f"{exc.code}: {exc.message}")
    else:
        logger.info(f"{exc.code}: {exc.message}")

    return Response(
        {
            'detail': exc.message,
            'error': exc.code.lower(),
            'details': exc.details,
        },
        status=code,
        headers=headers,
    )


def custom_exception_handler(exc, context):
    """
    Map domain and database errors onto JSON responses, then fall back to
    the default DRF handler.
    """
    if isinstance(exc, DomainException):
        return _domain_response(exc)

    if isinstance(exc, ProtectedError):
        protected = [str(o) for o in list(exc.protected_objects)[:5]]
        return Response(
            {
                'detail': 'Cannot delete: the object is referenced by other records.',
                'error': 'protected_error',
                'details': {'protected_objects_sample': protected},
            },
            status=status.HTTP_409_CONFLICT,
        )

    # Malformed lookups (e.g. a non-UUID id) that reach the ORM
    if isinstance(exc, DjangoValidationError):
        return Response(
            {
                'detail': 'Invalid value.',
                'error': 'validation_error',
                'details': {'messages': exc.messages},
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, IntegrityError):
        return Response(
            {
                'detail': 'Data integrity violation.',
                'error': 'integrity_error',
                'details': {},
            },
            status=status.HTTP_409_CONFLICT,
        )

    return exception_handler(exc, context)
