"""Shared pytest configuration for the users API test-suite."""

from tests.fixtures import *  # noqa: F401,F403
