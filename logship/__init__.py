# logship/__init__.py
"""Tail append-only log files and ship new lines to an HTTP collector."""

from logship.agent import Agent, LogTail, TailHandler, TailState
from logship.config import AgentConfig
from logship.uploader import BatchUploader, DeliveryError

__all__ = [
    "Agent",
    "AgentConfig",
    "BatchUploader",
    "DeliveryError",
    "LogTail",
    "TailHandler",
    "TailState",
]
__version__ = "0.1.0"
