"""Exception hierarchy for mdsync.

Parsing bad markdown is never an error (unparseable tables come back as
``None``).  These exceptions cover programming errors and defect conditions:
illegal tree surgery, illegal view lifecycle transitions, and placeholder
bookkeeping that does not add up.
"""


class MdsyncError(Exception):
    """Base exception for all mdsync errors."""


class TreeInvariantError(MdsyncError):
    """A mutation would break a document tree invariant (wrong child kind, nested table)."""


class SyncStateError(MdsyncError):
    """A view-sync operation was called from the wrong lifecycle phase."""


class PlaceholderMismatchError(MdsyncError):
    """The number of placeholder blocks found differs from the number of table regions."""

    def __init__(self, expected: int, found: int):
        super().__init__(f"Expected {expected} table placeholder(s) in the parsed tree, found {found}")
        self.expected = expected
        self.found = found
