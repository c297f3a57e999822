"""
Unit tests for retry handler with exponential backoff.
"""

from unittest.mock import Mock, patch

import pytest

from tickbooks.services.errors import RemoteError
from tickbooks.services.retry_handler import RetryHandler


class TestRetryHandler:
    """Test cases for RetryHandler."""

    @pytest.fixture
    def retry_handler(self):
        """RetryHandler instance with test configuration."""
        return RetryHandler(
            max_retries=3,
            base_delay=0.1,  # Short delay for testing
            max_delay=1.0,
            exponential_base=2,
            jitter_factor=0.1,
        )

    def test_initialization_with_defaults(self):
        """Test retry handler initializes with default values."""
        handler = RetryHandler()

        assert handler.max_retries == 2
        assert handler.base_delay == 1.0
        assert handler.max_delay == 30.0
        assert handler.exponential_base == 2
        assert handler.jitter_factor == 0.1

    def test_successful_execution_no_retry(self, retry_handler):
        """Test successful execution without retries."""
        mock_func = Mock(return_value="success")

        result = retry_handler.execute_with_retry(mock_func, "a", key="b")

        assert result == "success"
        mock_func.assert_called_once_with("a", key="b")

    def test_retry_on_rate_limit_error(self, retry_handler):
        """Test retry behavior on rate limit (429) errors."""
        mock_func = Mock()
        rate_limit_error = RemoteError(429, "Too many requests", "freshbooks")
        mock_func.side_effect = [rate_limit_error, rate_limit_error, "success"]

        with patch("time.sleep") as mock_sleep:
            result = retry_handler.execute_with_retry(mock_func)

        assert result == "success"
        assert mock_func.call_count == 3
        assert mock_sleep.call_count == 2

    def test_retry_on_transport_failure(self, retry_handler):
        """Test retry behavior on timeouts and refused connections (code 0)."""
        mock_func = Mock()
        mock_func.side_effect = [RemoteError(0, "Timed out", "tick"), "success"]

        with patch("time.sleep") as mock_sleep:
            result = retry_handler.execute_with_retry(mock_func)

        assert result == "success"
        assert mock_sleep.call_count == 1

    def test_retry_on_server_error(self, retry_handler):
        """Test retry behavior on server (5xx) errors."""
        mock_func = Mock()
        mock_func.side_effect = [RemoteError(503, "Unavailable", "tick"), "success"]

        with patch("time.sleep"):
            result = retry_handler.execute_with_retry(mock_func)

        assert result == "success"
        assert mock_func.call_count == 2

    @pytest.mark.parametrize("code", [401, 404])
    def test_no_retry_on_client_error(self, retry_handler, code):
        """Test no retry on client (4xx) errors except 429."""
        mock_func = Mock(side_effect=RemoteError(code, "Client error", "freshbooks"))

        with patch("time.sleep") as mock_sleep:
            with pytest.raises(RemoteError) as exc_info:
                retry_handler.execute_with_retry(mock_func)

        assert exc_info.value.code == code
        mock_func.assert_called_once()
        mock_sleep.assert_not_called()

    def test_no_retry_on_unrelated_exception(self, retry_handler):
        """Programming errors are raised immediately."""
        mock_func = Mock(side_effect=KeyError("missing"))

        with pytest.raises(KeyError):
            retry_handler.execute_with_retry(mock_func)

        mock_func.assert_called_once()

    def test_exhausted_retries_reraise_last_error(self, retry_handler):
        """The last RemoteError is re-raised unchanged after max retries."""
        errors = [RemoteError(500, f"Server error {i}", "tick") for i in range(4)]
        mock_func = Mock(side_effect=errors)

        with patch("time.sleep"):
            with pytest.raises(RemoteError) as exc_info:
                retry_handler.execute_with_retry(mock_func)

        assert exc_info.value is errors[-1]
        assert mock_func.call_count == 4  # initial + 3 retries

    def test_zero_retries_makes_single_attempt(self):
        """max_retries=0 disables retrying."""
        handler = RetryHandler(max_retries=0)
        mock_func = Mock(side_effect=RemoteError(0, "Timed out", "tick"))

        with patch("time.sleep") as mock_sleep:
            with pytest.raises(RemoteError):
                handler.execute_with_retry(mock_func)

        mock_func.assert_called_once()
        mock_sleep.assert_not_called()

    def test_exponential_backoff_calculation(self, retry_handler):
        """Test exponential backoff delay calculation."""
        delays = []

        with patch("time.sleep") as mock_sleep:
            mock_sleep.side_effect = lambda delay: delays.append(delay)
            mock_func = Mock(side_effect=[RemoteError(500, "Server error", "tick")] * 4)

            with pytest.raises(RemoteError):
                retry_handler.execute_with_retry(mock_func)

        assert len(delays) == 3
        # Allow for jitter which can change a delay by up to 10%
        assert 0.09 <= delays[0] <= 0.11
        assert 0.18 <= delays[1] <= 0.22
        assert 0.36 <= delays[2] <= 0.44

    def test_max_delay_cap(self):
        """Test that delays are capped at max_delay."""
        handler = RetryHandler(
            max_retries=5,
            base_delay=10.0,
            max_delay=2.0,
            exponential_base=3,
        )

        delays = []
        with patch("time.sleep") as mock_sleep:
            mock_sleep.side_effect = lambda delay: delays.append(delay)
            mock_func = Mock(side_effect=[RemoteError(502, "Bad gateway", "tick")] * 6)

            with pytest.raises(RemoteError):
                handler.execute_with_retry(mock_func)

        assert len(delays) == 5
        assert all(delay <= 2.2 for delay in delays)  # max_delay + 10% jitter

    def test_custom_retry_condition(self):
        """A custom condition replaces the default classification."""
        handler = RetryHandler(
            max_retries=1, base_delay=0, retry_condition=lambda e: isinstance(e, KeyError)
        )
        mock_func = Mock(side_effect=[KeyError("flaky"), "success"])

        with patch("time.sleep"):
            assert handler.execute_with_retry(mock_func) == "success"
