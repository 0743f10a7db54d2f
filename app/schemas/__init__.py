# ruff: noqa: F403, F401
"""Schemas package initialization."""

# Import all schemas to ensure they're registered
from .base import *
from .message import *
from .session import *
from .user import *

# Rebuild models to resolve forward references
SummarizeTitleRequest.model_rebuild()
SendMessageResponse.model_rebuild()
