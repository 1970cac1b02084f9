# ruff: noqa: F403, F401
"""Schemas package initialization."""

# Import all schemas to ensure they're registered
from .base import *
from .user import *
from .workspace import *
from .task import *
from .section import *
from .project import *
