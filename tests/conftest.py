"""Global pytest configuration and fixtures for CDK testing."""

import os

# core.conf reads the environment on import, before any fixture runs
os.environ["ENV"] = "dev"
for key, value in {
    "CDK_DEFAULT_ACCOUNT": "123456789012",
    "CDK_DEFAULT_REGION": "us-east-1",
    "CDK_DISABLE_VERSION_CHECK": "true",
}.items():
    if key not in os.environ:
        os.environ[key] = value

import pytest
from aws_cdk import App, Environment

from core import conf


@pytest.fixture
def cdk_app():
    """Create a fresh CDK App instance for each test."""
    return App()


@pytest.fixture(scope="session")
def aws_environment():
    return Environment(
        account=conf.AWS_ACCOUNT_ID,
        region=conf.AWS_REGION,
    )


