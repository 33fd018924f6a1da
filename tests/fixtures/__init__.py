"""Shared pytest fixtures and helpers for the users API tests."""

from .core import *  # noqa: F401,F403
from .users import *  # noqa: F401,F403
