"""Sync engine for pteroupload - cleanup, upload and post-processing."""

from .cleanup import CleanupPlanner, should_delete
from .engine import SyncEngine
from .operations import SyncOperations
from .scanner import RemoteLister, SourceScanner, validate_source_file

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "CleanupPlanner",
    "should_delete",
    "RemoteLister",
    "SourceScanner",
    "validate_source_file",
]
