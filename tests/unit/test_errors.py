"""Unit tests for the error hierarchy (smsgraph/errors.py)."""

import pytest

from smsgraph.errors import (
    ConfigurationError,
    ErrorCode,
    GraphExportError,
    OracleError,
    OracleRequestError,
    OracleUnavailableError,
    SmsGraphError,
    ValidationError,
    validation_required,
    validation_type_error,
)


class TestErrorCode:
    """Tests for ErrorCode enum."""

    def test_error_code_values_are_unique(self):
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_error_code_categories(self):
        """Error codes follow category prefixes."""
        for code in ErrorCode:
            if code == ErrorCode.UNKNOWN:
                continue
            assert code.value[:4] in {"CFG_", "ORC_", "VAL_", "EXP_"}


class TestSmsGraphError:
    """Tests for SmsGraphError base class."""

    def test_default_message(self):
        error = SmsGraphError()
        assert error.message == "An error occurred"
        assert error.code == ErrorCode.UNKNOWN
        assert error.details == {}

    def test_custom_message_and_cause(self):
        cause = OSError("boom")
        error = SmsGraphError("Something broke", cause=cause)
        assert str(error) == "Something broke"
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_repr(self):
        error = SmsGraphError("x", code=ErrorCode.ORC_TIMEOUT, details={"k": 1})
        assert repr(error) == "SmsGraphError('x', code='ORC_TIMEOUT', details={'k': 1})"

    def test_to_dict(self):
        error = ValidationError("Bad input", field="body")
        assert error.to_dict() == {
            "error": "ValidationError",
            "code": "VAL_INVALID_INPUT",
            "detail": "Bad input",
            "details": {"field": "body"},
        }

    def test_to_dict_without_details(self):
        assert "details" not in SmsGraphError("plain").to_dict()

    def test_catchable_as_base(self):
        with pytest.raises(SmsGraphError):
            raise GraphExportError(path="/tmp/x.json")


class TestSubclasses:
    """Tests for the specific error types."""

    def test_configuration_error(self):
        error = ConfigurationError(config_key="topic_mode", config_path="/tmp/c.json")
        assert error.code == ErrorCode.CFG_INVALID
        assert error.details == {"config_key": "topic_mode", "config_path": "/tmp/c.json"}

    def test_oracle_hierarchy(self):
        assert issubclass(OracleUnavailableError, OracleError)
        assert issubclass(OracleRequestError, OracleError)
        assert OracleUnavailableError().code == ErrorCode.ORC_UNAVAILABLE

    def test_oracle_request_timeout(self):
        error = OracleRequestError(timeout_seconds=120.0, base_url="http://x", model_name="m")
        assert error.code == ErrorCode.ORC_TIMEOUT
        assert error.details == {"timeout_seconds": 120.0, "base_url": "http://x", "model_name": "m"}

    def test_oracle_request_explicit_code_wins(self):
        error = OracleRequestError(timeout_seconds=5, code=ErrorCode.ORC_BAD_RESPONSE)
        assert error.code == ErrorCode.ORC_BAD_RESPONSE

    def test_export_error(self):
        error = GraphExportError(path="/tmp/graph.json")
        assert error.code == ErrorCode.EXP_WRITE_FAILED
        assert error.message == "Failed to write graph"
        assert error.details["path"] == "/tmp/graph.json"


class TestConvenienceFunctions:
    """Tests for the validation helpers."""

    def test_validation_required(self):
        error = validation_required("other_party_id")
        assert error.code == ErrorCode.VAL_MISSING_REQUIRED
        assert "other_party_id" in error.message

    def test_validation_type_error(self):
        error = validation_type_error("messages", {"a": 1}, "array")
        assert error.code == ErrorCode.VAL_TYPE_ERROR
        assert error.details["expected"] == "array"
        assert "got dict" in error.message
