"""Locking primitives for coordinating concurrent tool calls."""

from .keyed_lock import KeyedLock

__all__ = ["KeyedLock"]
