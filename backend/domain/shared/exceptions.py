"""
Domain Exceptions.

Errors raised by domain and application code. The API layer maps each
subclass onto an HTTP status in presentation.api.exception_handler.
"""

from typing import Optional, Any, Dict, Iterable


class DomainException(Exception):
    """Base exception for all domain errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "DOMAIN_ERROR"
        self.details = details or {}


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            message=f"{entity_type} with id '{entity_id}' not found",
            code="ENTITY_NOT_FOUND",
            details={"entity_type": entity_type, "entity_id": str(entity_id)}
        )


class EntityAlreadyExistsException(DomainException):
    """Raised when trying to create an entity that already exists."""

    def __init__(self, entity_type: str, identifier: Any):
        super().__init__(
            message=f"{entity_type} '{identifier}' already exists",
            code="ENTITY_ALREADY_EXISTS",
            details={"entity_type": entity_type, "identifier": str(identifier)}
        )


class InvalidOperationException(DomainException):
    """Raised when an operation is not valid in the current state."""

    def __init__(self, message: str, current_state: Optional[str] = None):
        super().__init__(
            message=message,
            code="INVALID_OPERATION",
            details={"current_state": current_state} if current_state else {}
        )


class ValidationException(DomainException):
    """Raised when an input value is rejected."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, "value": str(value) if value is not None else None}
        )


class ConcurrencyException(DomainException):
    """Raised when an optimistic update loses against a concurrent change."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        expected_version: int,
        actual_version: Optional[int] = None
    ):
        super().__init__(
            message=f"{entity_type} '{entity_id}' was modified by another user",
            code="CONCURRENCY_ERROR",
            details={
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "expected_version": expected_version,
                "actual_version": actual_version,
            }
        )


class StatusTransitionException(DomainException):
    """Raised when an invalid status transition is attempted."""

    def __init__(
        self,
        entity_type: str,
        current_status: str,
        target_status: str,
        allowed_transitions: Optional[Iterable[str]] = None
    ):
        super().__init__(
            message=f"Cannot transition {entity_type} from '{current_status}' to '{target_status}'",
            code="INVALID_STATUS_TRANSITION",
            details={
                "entity_type": entity_type,
                "current_status": current_status,
                "target_status": target_status,
                "allowed_transitions": sorted(allowed_transitions or []),
            }
        )


class AuthorizationException(DomainException):
    """Raised when user is not authorized to perform an operation."""

    def __init__(self, operation: str, resource: Optional[str] = None):
        super().__init__(
            message=f"Not authorized to perform '{operation}'" +
                    (f" on '{resource}'" if resource else ""),
            code="AUTHORIZATION_ERROR",
            details={"operation": operation, "resource": resource}
        )


class BusinessRuleViolationException(DomainException):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str):
        super().__init__(
            message=message,
            code="BUSINESS_RULE_VIOLATION",
            details={"rule": rule}
        )


class ExternalServiceException(DomainException):
    """Raised when a third-party service (e.g. the LLM task parser) fails."""

    def __init__(self, service: str, message: str, retry_after: Optional[int] = None):
        super().__init__(
            message=message,
            code="EXTERNAL_SERVICE_ERROR",
            details={"service": service, "retry_after": retry_after}
        )
        self.retry_after = retry_after
