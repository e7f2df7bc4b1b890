"""Snapshot assembly and persistence."""

from capscrape.storage.filesystem import FilesystemStorage
from capscrape.storage.snapshot import build_snapshot, sort_providers

__all__ = ["FilesystemStorage", "build_snapshot", "sort_providers"]
