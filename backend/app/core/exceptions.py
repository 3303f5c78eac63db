"""
Domain errors and their HTTP translation.

Domain code raises (or returns, inside a Result) the ClinicError subclasses
below. Routes turn them into HTTPExceptions through BusinessError so every
failure leaves the API with the same body shape:

    {"detail": {"error": <code>, "message": <text>, "details": [...]}}

Internal details are logged, never sent to the caller.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockShortfall:
    """One cart line that cannot be served from current stock."""

    medicine_id: str
    medicine_name: str
    requested_quantity: int
    available_stock: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "medicineId": self.medicine_id,
            "medicineName": self.medicine_name,
            "requestedQuantity": self.requested_quantity,
            "availableStock": self.available_stock,
        }


class ClinicError(Exception):
    """Base class for all domain errors."""

    code = "ClinicError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class ValidationError(ClinicError):
    """Malformed or missing input; raised before any mutation."""

    code = "ValidationError"
    status_code = status.HTTP_400_BAD_REQUEST

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, details=[{"field": field, "message": message}])


class NotFoundError(ClinicError):
    code = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} not found", details=[{"id": resource_id}])
        self.resource = resource
        self.resource_id = resource_id


class InsufficientStockError(ClinicError):
    """Requested quantities exceed what is on the shelf."""

    code = "InsufficientStock"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, shortfalls: List[StockShortfall]):
        names = ", ".join(s.medicine_name for s in shortfalls)
        super().__init__(
            f"Insufficient stock for: {names}",
            details=[s.to_dict() for s in shortfalls],
        )
        self.shortfalls = shortfalls


class InternalError(ClinicError):
    code = "InternalError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(code: str, message: str, details: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {"error": code, "message": message, "details": details or []}


class BusinessError:
    """HTTPException factories with consistent, non-leaky bodies."""

    @staticmethod
    def not_found(resource: str = "Resource", resource_id: str = "") -> HTTPException:
        logger.info(f"Not found: {resource} {resource_id}")
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_body(NotFoundError.code, f"{resource} not found"),
        )

    @staticmethod
    def bad_request(message: str, details: Optional[List[Dict[str, Any]]] = None) -> HTTPException:
        """
        400 for input validation errors.

        OK to include specific details here since the caller caused the issue.
        """
        logger.info(f"Bad request: {message}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_body(ValidationError.code, message, details),
        )

    @staticmethod
    def insufficient_stock(error: InsufficientStockError) -> HTTPException:
        logger.info(f"Insufficient stock: {error.message}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_body(error.code, error.message, error.details),
        )

    @staticmethod
    def server_error(original_error: Optional[Exception] = None) -> HTTPException:
        """
        Generic 500. Logs the real error, hides it from the caller.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {original_error}",
                exc_info=original_error,
            )
        else:
            logger.error("Internal server error occurred")
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_body(
                InternalError.code, "An internal error occurred. Please try again later."
            ),
        )

    @classmethod
    def from_domain(cls, error: ClinicError) -> HTTPException:
        """Translate any domain error to its HTTP form."""
        if isinstance(error, NotFoundError):
            return cls.not_found(error.resource, error.resource_id)
        if isinstance(error, InsufficientStockError):
            return cls.insufficient_stock(error)
        if isinstance(error, ValidationError):
            return cls.bad_request(error.message, error.details)
        return cls.server_error(error)

