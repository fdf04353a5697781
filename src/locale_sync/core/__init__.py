"""Core remote-service functionality shared between the CLI and the sync engine."""

from .async_utils import gather_all, run_sync
from .client import RemoteClient

__all__ = ["RemoteClient", "gather_all", "run_sync"]
