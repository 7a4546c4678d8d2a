"""Errors raised by store adapters."""


class PersistenceError(Exception):
    """A store call failed for an infrastructural reason."""


class DuplicateRecordError(PersistenceError):
    """An insert violated a uniqueness constraint."""
