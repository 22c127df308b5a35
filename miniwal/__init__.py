"""Durable JSON Lines journal, atomic snapshots and a journal-backed state manager."""

__version__ = "0.1.3"

__all__ = ["errors", "mutator", "snapshot", "state", "store"]