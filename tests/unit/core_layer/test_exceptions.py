"""
Unit Tests for Core Exceptions

Tests the exception hierarchy and its helpers.
"""

import pytest

from spanlens.core.exceptions import (
    ChatNotFoundError,
    InvalidInputError,
    MessageFinalizedError,
    ProviderAPIError,
    ProviderError,
    ProviderTimeoutError,
    RelayHTTPError,
    SourceLookupError,
    SourceNotFoundError,
    SourceUnavailableError,
    SpanlensError,
    StreamingError,
    ValidationError,
)


@pytest.mark.unit
class TestSpanlensError:
    """Test the base exception class."""

    def test_base_error_creation(self):
        error = SpanlensError("Test message")
        assert str(error) == "Test message"
        assert error.message == "Test message"

    def test_base_error_default_values(self):
        error = SpanlensError("Test")
        assert error.details == {}  # Defaults to empty dict, not None
        assert error.thread_id is None

    def test_details_are_copied(self):
        details = {"key": "value"}
        error = SpanlensError("Test", details=details)
        error.details["other"] = 1

        assert details == {"key": "value"}

    def test_to_dict(self):
        error = ProviderAPIError("rate limited", thread_id="t-1", details={"code": 429})

        assert error.to_dict() == {
            "error_type": "ProviderAPIError",
            "message": "rate limited",
            "thread_id": "t-1",
            "details": {"code": 429},
        }

    def test_with_context_chains(self):
        error = SpanlensError("Test").with_context(source="dictionary")

        assert isinstance(error, SpanlensError)
        assert error.details["source"] == "dictionary"

    def test_repr_includes_context(self):
        error = SpanlensError("boom", thread_id="abc", details={"a": 1})

        assert repr(error) == "SpanlensError(message='boom', thread_id='abc', details={'a': 1})"

    def test_from_exception_wraps_original(self):
        original = TimeoutError("read timed out")

        error = SourceUnavailableError.from_exception(original, source="encyclopedia")

        assert isinstance(error, SourceUnavailableError)
        assert error.message == "read timed out"
        assert error.details["original_error"] == "TimeoutError"
        assert error.details["source"] == "encyclopedia"

    def test_from_exception_uses_class_name_when_message_empty(self):
        error = SpanlensError.from_exception(RuntimeError())
        assert error.message == "RuntimeError"


@pytest.mark.unit
class TestHierarchy:
    """Themed exceptions inherit from the right bases."""

    @pytest.mark.parametrize(
        "cls,base",
        [
            (InvalidInputError, ValidationError),
            (ProviderTimeoutError, ProviderError),
            (ProviderAPIError, ProviderError),
            (RelayHTTPError, StreamingError),
            (SourceNotFoundError, SourceLookupError),
            (SourceUnavailableError, SourceLookupError),
            (MessageFinalizedError, SpanlensError),
            (ChatNotFoundError, SpanlensError),
        ],
    )
    def test_inheritance(self, cls, base):
        error = cls("Test")
        assert isinstance(error, base)
        assert isinstance(error, SpanlensError)

    def test_relay_http_error_exposes_status_code(self):
        error = RelayHTTPError("spanText and context required", details={"status_code": 400})
        assert error.status_code == 400

    def test_relay_http_error_without_status(self):
        assert RelayHTTPError("boom").status_code is None
