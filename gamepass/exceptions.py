"""
Standardized exception hierarchy for the Game Pass core
Provides rich context, consistent logging, and user-friendly error messages
"""

from typing import Optional, Dict, Any
from uuid import uuid4
import logging

from gamepass.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)


class GamePassError(Exception):
    """
    Base exception for all Game Pass errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise GamePassError(
            message="Failed to save claim",
            user_id="uid-123",
            operation="submit_claim",
            context={"achievement_id": "first_goal"}
        )
    """

    code = "internal"
    status_code = 500
    log_level = logging.ERROR

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = now_utc()

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_code": self.code,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,  # Avoid conflict with logging's 'context'
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Business Rule Rejections
# ==========================================

class BusinessRuleError(GamePassError):
    """
    Base class for rejections of a well-formed request

    These are never retried: the caller gets the reason back synchronously.
    """

    log_level = logging.WARNING

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["context"] = self.context
        return data


class UnauthenticatedError(BusinessRuleError):
    """No caller identity where one is required"""

    code = "unauthenticated"
    status_code = 401

    def __init__(self, message: str = "Login required", **kwargs):
        super().__init__(
            message=message,
            user_message="Please log in to continue.",
            **kwargs
        )


class PermissionDeniedError(BusinessRuleError):
    """Caller lacks the capability for the requested operation"""

    code = "permission_denied"
    status_code = 403

    def __init__(
        self,
        message: str = "Moderators only",
        resource: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        self.resource = resource
        super().__init__(
            message=message,
            user_message=f"You don't have permission to access {resource or 'this resource'}.",
            context={"resource": resource, **(context or {})},
            **kwargs
        )


class NotFoundError(BusinessRuleError):
    """Referenced claim or achievement does not exist"""

    code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id, **(context or {})},
            **kwargs
        )


class FailedPreconditionError(BusinessRuleError):
    """
    A business rule rejected the operation

    Examples:
    - Achievement inactive or already earned
    - Duplicate pending claim
    - Missing prerequisite
    - Claim already reviewed
    - Daily bonus cooldown not elapsed
    """

    code = "failed_precondition"
    status_code = 409

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        self.reason = reason
        super().__init__(
            message=message,
            user_message=message,
            context={"reason": reason, **(context or {})},
            **kwargs
        )


class InvalidArgumentError(BusinessRuleError):
    """
    Raised when request input is malformed

    Example:
        raise InvalidArgumentError(
            message="action must be approve or reject",
            field="action",
            value="delete"
        )
    """

    code = "invalid_argument"
    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value, **(context or {})},
            **kwargs
        )


# ==========================================
# Database Errors
# ==========================================

class DatabaseError(GamePassError):
    """
    Base class for database-related errors
    """
    pass


class ConnectionError(DatabaseError):
    """Database connection failed"""

    status_code = 503

    def __init__(self, message: str = "Database connection failed", **kwargs):
        super().__init__(
            message=message,
            user_message="We're having trouble connecting to the database. Please try again in a moment.",
            **kwargs
        )


class QueryError(DatabaseError):
    """Database query execution failed"""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        self.query = query
        super().__init__(
            message=message,
            user_message="We encountered an issue saving your data. Please try again.",
            context={"query": query, **(context or {})},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(GamePassError):
    """System configuration is invalid or missing"""

    code = "unavailable"
    status_code = 503

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key, **(context or {})},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> GamePassError:
    """
    Wrap driver exceptions (psycopg, pool timeouts) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate GamePassError subclass

    Example:
        try:
            await cur.execute(query)
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="review", user_id="uid-1")
    """
    import psycopg
    from psycopg_pool import PoolTimeout

    if isinstance(error, GamePassError):
        return error

    if isinstance(error, (psycopg.OperationalError, PoolTimeout)):
        return ConnectionError(
            message=f"Database connection failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, psycopg.Error):
        return QueryError(
            message=f"Database query failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    # Generic fallback
    return GamePassError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
