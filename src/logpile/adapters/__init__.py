"""Adapters implementing core ports: line sources, logging and HTTP."""

from logpile.adapters.sources import FileLineSource, FollowedFile, create_sources

__all__ = [
    "FileLineSource",
    "FollowedFile",
    "create_sources",
]
