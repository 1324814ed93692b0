"""Data store package for Right Guard.

Relational persistence for identity records, legal guides, incident records,
alert logs, and purchase logs. :class:`RecordStore` offers primary-key CRUD with
pagination over any of the tables declared in :mod:`rightguard.store.sql`.
"""

from .records import RecordStore

__all__ = ["RecordStore"]
