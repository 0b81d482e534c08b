"""Unit tests for the exception hierarchy"""
import pytest
import psycopg
from datetime import datetime, timedelta
from psycopg_pool import PoolTimeout

from gamepass.exceptions import (
    GamePassError,
    BusinessRuleError,
    UnauthenticatedError,
    PermissionDeniedError,
    NotFoundError,
    FailedPreconditionError,
    InvalidArgumentError,
    DatabaseError,
    ConnectionError,
    QueryError,
    ConfigurationError,
    wrap_external_exception
)


class TestGamePassError:
    """Test base exception class"""

    def test_basic_exception(self):
        error = GamePassError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert error.status_code == 500
        assert isinstance(error.timestamp, datetime)
        assert error.timestamp.utcoffset() == timedelta(0)

    def test_exception_with_context(self):
        error = GamePassError(
            message="Failed to save claim",
            user_id="player-1",
            operation="submit_claim",
            context={"achievement_id": "first_goal"},
            user_message="Could not save your claim"
        )
        assert error.user_id == "player-1"
        assert error.operation == "submit_claim"
        assert error.context["achievement_id"] == "first_goal"
        assert error.user_message == "Could not save your claim"

    def test_to_dict(self):
        error_dict = GamePassError(message="Test error").to_dict()
        assert error_dict["error"] == "GamePassError"
        assert error_dict["code"] == "internal"
        assert error_dict["message"] == "Test error"
        assert "request_id" in error_dict
        assert "timestamp" in error_dict
        assert "context" not in error_dict


class TestBusinessRuleErrors:
    """Test rejections of well-formed requests"""

    @pytest.mark.parametrize("error,status,code", [
        (UnauthenticatedError(), 401, "unauthenticated"),
        (PermissionDeniedError(resource="moderation"), 403, "permission_denied"),
        (NotFoundError("Claim missing", record_type="Claim", record_id="c1"), 404, "not_found"),
        (FailedPreconditionError("Already earned", reason="already_earned"), 409, "failed_precondition"),
        (InvalidArgumentError("Bad action", field="action", value="delete"), 400, "invalid_argument"),
    ])
    def test_status_and_code(self, error, status, code):
        assert isinstance(error, BusinessRuleError)
        assert error.status_code == status
        assert error.code == code

    def test_failed_precondition_reason_in_payload(self):
        error = FailedPreconditionError(
            "Missing prerequisite: first_goal",
            reason="missing_prerequisite",
            context={"missing": ["first_goal"]}
        )
        payload = error.to_dict()
        assert payload["user_message"] == "Missing prerequisite: first_goal"
        assert payload["context"] == {"reason": "missing_prerequisite", "missing": ["first_goal"]}

    def test_invalid_argument_user_message(self):
        error = InvalidArgumentError(message="Must be positive", field="season", value=0)
        assert error.field == "season"
        assert error.value == 0
        assert "Invalid season" in error.user_message

    def test_not_found_user_message(self):
        error = NotFoundError(message="Claim c1 does not exist", record_type="Claim", record_id="c1")
        assert error.record_id == "c1"
        assert error.user_message == "Claim not found."


class TestInfrastructureErrors:
    """Test database and configuration errors"""

    def test_connection_error(self):
        error = ConnectionError()
        assert isinstance(error, DatabaseError)
        assert error.status_code == 503
        assert "database" in error.user_message.lower()

    def test_query_error(self):
        error = QueryError(message="Query failed", query="SELECT 1")
        assert error.query == "SELECT 1"

    def test_configuration_error(self):
        error = ConfigurationError("JWT_SECRET_KEY is required", config_key="JWT_SECRET_KEY")
        assert error.config_key == "JWT_SECRET_KEY"
        assert error.status_code == 503


class TestWrapExternalException:
    """Test driver exception wrapping"""

    def test_passes_through_own_errors(self):
        original = NotFoundError("Claim missing")
        assert wrap_external_exception(original, operation="review") is original

    def test_operational_error_becomes_connection_error(self):
        wrapped = wrap_external_exception(psycopg.OperationalError("server closed"), operation="review")
        assert isinstance(wrapped, ConnectionError)
        assert wrapped.operation == "review"

    def test_pool_timeout_becomes_connection_error(self):
        wrapped = wrap_external_exception(PoolTimeout("no connection"), operation="review")
        assert isinstance(wrapped, ConnectionError)

    def test_other_driver_error_becomes_query_error(self):
        wrapped = wrap_external_exception(psycopg.DataError("bad input"), operation="submit_claim")
        assert isinstance(wrapped, QueryError)

    def test_unknown_error_falls_back_to_base(self):
        wrapped = wrap_external_exception(RuntimeError("boom"), operation="claim_daily", user_id="p1")
        assert type(wrapped) is GamePassError
        assert wrapped.cause is not None
