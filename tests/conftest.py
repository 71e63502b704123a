"""
Pytest configuration and shared fixtures for AWS Reservations tests.
"""

import tempfile
from pathlib import Path

import pytest
from moto import mock_aws

from aws_reservations.core.config import ConfigManager


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_REGION", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def mock_aws_services():
    """Mock all AWS services used by the application."""
    with mock_aws():
        yield


@pytest.fixture
def temp_config_manager():
    """Config manager writing into a temporary directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield ConfigManager(config_dir=Path(temp_dir))
