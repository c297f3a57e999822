"""
Global pytest configuration and fixtures.
"""
import os
import pytest
from unittest.mock import Mock
from typing import Dict

import requests
from click.testing import CliRunner

from tickbooks.config import TickbooksConfig, reload_config
from tickbooks.config.logging_config import reset_logging
from tickbooks.models import Credentials, CredentialSet, TimeEntry


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'TICK_URL': 'acme',
        'TICK_EMAIL': 'billing@acme.test',
        'TICK_PASSWORD': 'tick-secret',
        'FRESHBOOKS_URL': 'https://acme.freshbooks.com/api/2.1/xml-in',
        'FRESHBOOKS_TOKEN': 'fb-token',
        'ENVIRONMENT': 'testing',
        'DEBUG': 'true',
        'LOG_LEVEL': 'DEBUG',
        'MAX_RETRIES': '0',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch, tmp_path):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv('JOIN_STORE_PATH', str(tmp_path / 'join_records.json'))

    # Clear the global config to force reload with test values
    import tickbooks.config.settings
    tickbooks.config.settings._config = None

    yield test_env_vars

    # Clean up
    tickbooks.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> TickbooksConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def tick_credentials() -> Credentials:
    return Credentials(
        base_url='https://acme.tickspot.com',
        identity='billing@acme.test',
        secret='tick-secret',
    )


@pytest.fixture
def freshbooks_credentials() -> Credentials:
    return Credentials(
        base_url='https://acme.freshbooks.com/api/2.1/xml-in',
        identity='fb-token',
    )


@pytest.fixture
def credential_set(tick_credentials, freshbooks_credentials) -> CredentialSet:
    return CredentialSet(
        time_tracking=tick_credentials,
        invoicing=freshbooks_credentials,
    )


@pytest.fixture
def mock_session():
    """Mock requests session."""
    return Mock(spec=requests.Session)


def make_response(
    body: str = '',
    status_code: int = 200,
    content_type: str = 'application/xml',
) -> Mock:
    """Build a mock HTTP response carrying an XML (or other) body."""
    response = Mock()
    response.status_code = status_code
    response.headers = {'Content-Type': content_type}
    response.text = body
    response.content = body.encode('utf-8')
    return response


@pytest.fixture
def xml_response():
    """Factory for mock HTTP responses."""
    return make_response


@pytest.fixture
def sample_entries():
    """Open Tick entries of one project."""
    return [
        TimeEntry(
            entry_id=101,
            entry_date='2024-03-04',
            client_name='Acme Inc',
            project_name='Website',
            project_id='55',
            task_name='Design',
            task_id=7,
            notes='Wireframes',
            hours=2.0,
        ),
        TimeEntry(
            entry_id=102,
            entry_date='2024-03-01',
            client_name='Acme Inc',
            project_name='Website',
            project_id='55',
            task_name='Development',
            task_id=8,
            notes='Landing page',
            hours=3.0,
        ),
    ]


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_env(mock_env, monkeypatch):
    """Test environment for CLI invocations, without console logging."""
    monkeypatch.setenv('LOG_CONSOLE', 'false')
    monkeypatch.delenv('LOG_FILE', raising=False)
    yield mock_env
    reset_logging()


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    # Remove test coverage files in case they're created
    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        # Add unit marker for tests in tests/unit/
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Add integration marker for tests in tests/integration/
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
