"""
Errors raised by the booking, payment and inventory services.

Each subclass is a DRF ``APIException`` so views can let them propagate and the
framework renders the status code and ``detail`` payload. Services raise them
from inside ``transaction.atomic`` blocks, so nothing partial is committed.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class BookingWorkflowError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Unable to process the booking request."
    default_code = "booking_error"


class ValidationError(BookingWorkflowError):
    """Bad input; the caller can correct it and retry."""

    default_detail = "Invalid input."
    default_code = "invalid"


class NotFoundError(BookingWorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class CapacityError(BookingWorkflowError):
    """The package no longer has enough seats for the booking."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Not enough seats are available."
    default_code = "capacity"


class AuthorizationError(BookingWorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have access to this booking."
    default_code = "permission_denied"


class ProviderError(BookingWorkflowError):
    """The payment provider call failed. Not retried automatically."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "The payment service is unavailable. Please try again."
    default_code = "provider_error"


class ConcurrencyConflict(BookingWorkflowError):
    """A row changed underneath the operation; reload and retry once."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record was modified by another request. Reload and try again."
    default_code = "conflict"
