from typing import Dict, Any, Optional
from datetime import datetime
from fastapi import status
import logging

logger = logging.getLogger(__name__)


class BaseCustomException(Exception):
    """Base class for custom exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


class ValidationError(BaseCustomException):
    """Exception for missing or malformed input"""

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code=error_code or "VALIDATION_ERROR"
        )


class AuthenticationError(BaseCustomException):
    """Exception for authentication errors"""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
            error_code=error_code or "AUTHENTICATION_ERROR"
        )


class AuthorizationError(BaseCustomException):
    """Exception for authorization errors"""

    def __init__(
        self,
        message: str = "Access denied",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
            error_code=error_code or "AUTHORIZATION_ERROR"
        )


class ForbiddenError(AuthorizationError):
    """Raised when the caller does not own the resource it is acting on"""

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, details=details, error_code="FORBIDDEN")


class NotFoundError(BaseCustomException):
    """Exception for resource not found errors"""

    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
            error_code=error_code or "NOT_FOUND_ERROR"
        )


class ConflictError(BaseCustomException):
    """Exception for conflict errors"""

    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
            error_code=error_code or "CONFLICT_ERROR"
        )


class InvalidStateError(BaseCustomException):
    """Raised when a transition is attempted from the wrong state"""

    def __init__(
        self,
        message: str = "Invalid state transition",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code=error_code or "INVALID_STATE"
        )


class PaymentRequiredError(BaseCustomException):
    """Raised by the report gate while the linked booking is unpaid"""

    def __init__(
        self,
        message: str = "Payment is not verified. Please complete your payment to access the report.",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
            error_code="PAYMENT_REQUIRED"
        )


class ExternalServiceError(BaseCustomException):
    """Exception for external service errors"""

    def __init__(
        self,
        message: str = "External service error",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details,
            error_code=error_code or "EXTERNAL_SERVICE_ERROR"
        )


class GatewayError(ExternalServiceError):
    """Payment provider unreachable or misconfigured"""

    def __init__(
        self,
        message: str = "Payment gateway not configured",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, error_code="GATEWAY_ERROR")


# OTP errors

class OtpNotFoundError(ValidationError):
    def __init__(self, message: str = "No verification request found. Please request a new OTP."):
        super().__init__(message=message, error_code="OTP_NOT_FOUND")


class ExpiredError(ValidationError):
    def __init__(self, message: str = "OTP has expired. Please request a new OTP."):
        super().__init__(message=message, error_code="OTP_EXPIRED")


class InvalidCodeError(ValidationError):
    def __init__(self, remaining_attempts: int):
        if remaining_attempts > 0:
            message = f"Invalid OTP. {remaining_attempts} attempts remaining."
        else:
            message = "Invalid OTP. Please request a new OTP."
        super().__init__(
            message=message,
            details={"remaining_attempts": remaining_attempts},
            error_code="OTP_INVALID"
        )


class AttemptsExceededError(ValidationError):
    def __init__(self, message: str = "Maximum attempts exceeded. Please request a new OTP."):
        super().__init__(message=message, error_code="OTP_ATTEMPTS_EXCEEDED")


# Credential errors

class InvalidCredentialsError(AuthenticationError):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message=message, error_code="INVALID_CREDENTIALS")


class NoPasswordSetError(AuthenticationError):
    def __init__(self):
        super().__init__(
            message="Password not set. Please use forgot password to set one.",
            error_code="NO_PASSWORD_SET"
        )


class EmailNotVerifiedError(AuthorizationError):
    """Login refused until the email address is verified; retryable after a resend"""

    def __init__(self, email: str):
        super().__init__(
            message="Please verify your email before logging in.",
            details={"requires_verification": True, "email": email},
            error_code="EMAIL_NOT_VERIFIED"
        )


# Exception handler functions
def create_error_response(
    exception: BaseCustomException,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create standardized error response"""
    response = {
        "error": exception.__class__.__name__.replace("Error", " Error").strip(),
        "message": exception.message,
        "error_code": exception.error_code,
        "timestamp": datetime.utcnow().isoformat(),
        "request_id": request_id
    }

    if exception.details:
        response["details"] = exception.details

    return response


def create_validation_error_response(
    exception: ValidationError,
    validation_errors: Optional[Dict[str, list]] = None,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    """Create validation error response"""
    response = {
        "error": "Validation Error",
        "message": exception.message,
        "error_code": exception.error_code,
        "timestamp": datetime.utcnow().isoformat(),
        "request_id": request_id
    }

    if validation_errors:
        response["validation_errors"] = validation_errors

    if exception.details:
        response["details"] = exception.details

    return response


def handle_external_service_error(
    error: Exception,
    service_name: str,
    operation: str = "request"
) -> ExternalServiceError:
    """Handle external service errors"""
    logger.error(f"External service error for {service_name}: {error}")

    return ExternalServiceError(
        message=f"External service {service_name} unavailable",
        details={
            "service_name": service_name,
            "operation": operation,
        },
        error_code="EXTERNAL_SERVICE_ERROR"
    )
