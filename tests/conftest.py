"""Pytest configuration and shared fixtures."""

import os

import pytest
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep SLACKMARK_* variables from the outer shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("SLACKMARK_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def runner():
    """Click runner for CLI commands."""
    return CliRunner()
