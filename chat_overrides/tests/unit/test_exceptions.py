"""
Unit tests for the exception hierarchy.
"""

from unittest.mock import patch

from chat_overrides.exceptions import (
    ChatOverridesError,
    ConfigurationError,
    ErrorContext,
    InvalidColorFormat,
    OverrideStoreError,
    SessionDisconnectedError,
)


def test_error_to_dict():
    """Test the serialized error shape."""
    error = OverrideStoreError("write failed", ErrorContext(account_id="steve"), operation="upsert")

    data = error.to_dict()

    assert data["error_type"] == "OverrideStoreError"
    assert data["message"] == "write failed"
    assert data["user_friendly"] == "write failed"
    assert data["context"]["account_id"] == "steve"
    assert data["details"] == {"operation": "upsert"}


def test_hierarchy():
    """Test that every plugin error shares the base class."""
    for error in (
        InvalidColorFormat("x"),
        OverrideStoreError("x"),
        SessionDisconnectedError(1),
        ConfigurationError("x", config_key="chat_format"),
    ):
        assert isinstance(error, ChatOverridesError)


def test_session_disconnected_context():
    """Test that disconnect errors identify the session."""
    error = SessionDisconnectedError(7)

    assert error.session_index == 7
    assert error.context.session_index == 7


def test_configuration_error_details():
    """Test the config key detail."""
    assert ConfigurationError("bad", config_key="chat_format").details == {"config_key": "chat_format"}


def test_disconnect_logs_at_debug():
    """Test that an ordinary disconnect is not reported as a warning."""
    with patch("chat_overrides.exceptions.logger") as mock_logger:
        SessionDisconnectedError(3)
        OverrideStoreError("unreadable")

    mock_logger.debug.assert_called_once()
    assert mock_logger.debug.call_args.kwargs["error_type"] == "SessionDisconnectedError"
    mock_logger.warning.assert_called_once()
    assert mock_logger.warning.call_args.kwargs["error_type"] == "OverrideStoreError"
