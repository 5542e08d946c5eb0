"""
Unit tests for logger module.
"""

import logging
from unittest.mock import MagicMock

import structlog
from structlog.testing import capture_logs

from jobflow.utils.logger import configure_logging, get_logger, mask_credentials


class TestMaskCredentials:
    """Test cases for mask_credentials processor."""

    def test_masks_password_and_token(self):
        """Password and token values never reach the log."""
        # Arrange
        event_dict = {"event": "Login", "email": "alice@example.com", "password": "hunter2"}
        event_dict["token"] = "eyJhbGciOi"

        # Act
        result = mask_credentials(MagicMock(), "info", event_dict)

        # Assert
        assert result["password"] == "***MASKED***"
        assert result["token"] == "***MASKED***"
        assert result["email"] == "alice@example.com"

    def test_masks_authorization_header_field(self):
        """An authorization field (bearer header) is masked."""
        # Arrange
        event_dict = {"event": "Request", "authorization": "Bearer abc"}

        # Act
        result = mask_credentials(MagicMock(), "debug", event_dict)

        # Assert
        assert result["authorization"] == "***MASKED***"

    def test_masks_prefixed_and_suffixed_names(self):
        """Fields like jwt_token or api_key_header are masked too."""
        # Arrange
        event_dict = {"jwt_token": "abc", "api_key_header": "xyz"}

        # Act
        result = mask_credentials(MagicMock(), "info", event_dict)

        # Assert
        assert result["jwt_token"] == "***MASKED***"
        assert result["api_key_header"] == "***MASKED***"

    def test_keeps_fields_that_only_contain_sensitive_words(self):
        """Word-boundary matching: 'author' or 'tokens_left' are not secrets."""
        # Arrange
        event_dict = {"author": "bob", "tokenizer": "bpe", "count": 3}

        # Act
        result = mask_credentials(MagicMock(), "info", event_dict)

        # Assert
        assert result == {"author": "bob", "tokenizer": "bpe", "count": 3}


class TestConfigureLogging:
    """Test cases for configure_logging function."""

    def test_creates_nested_log_directory(self, tmp_path):
        """The log file's parent directories are created."""
        # Arrange
        log_file = tmp_path / "a" / "b" / "jobflow.log"

        # Act
        configure_logging(log_file=str(log_file), log_level="DEBUG")

        # Assert
        assert log_file.parent.is_dir()

    def test_quiets_httpx_request_logging(self, tmp_path):
        """httpx's own per-request INFO lines are suppressed."""
        # Act
        configure_logging(log_file=str(tmp_path / "jobflow.log"))

        # Assert
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_installs_masking_processor(self, tmp_path, mocker):
        """structlog is configured with the mask_credentials processor."""
        # Arrange
        configure_spy = mocker.spy(structlog, "configure")

        # Act
        configure_logging(log_file=str(tmp_path / "jobflow.log"))

        # Assert
        processors = configure_spy.call_args.kwargs["processors"]
        assert mask_credentials in processors


class TestGetLogger:
    """Test cases for get_logger function."""

    def test_binds_view_and_component(self):
        """Bound context appears on every event."""
        # Act
        with capture_logs() as logs:
            logger = get_logger(correlation_id="cid-1", view="job_urls", component="svc")
            logger.info("Job URLs loaded", count=2)

        # Assert
        assert logs[0]["correlation_id"] == "cid-1"
        assert logs[0]["view"] == "job_urls"
        assert logs[0]["component"] == "svc"
        assert logs[0]["count"] == 2

    def test_generates_correlation_id_when_missing(self):
        """A UUID correlation ID is bound when none is given."""
        # Act
        with capture_logs() as logs:
            get_logger().info("hello")

        # Assert
        assert len(logs[0]["correlation_id"]) == 36
