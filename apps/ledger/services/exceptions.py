"""Domain exceptions for the ledger app."""


class LedgerServiceError(Exception):
    """Base exception for all ledger service errors."""
    pass


class DuplicateDateError(LedgerServiceError):
    """A sale entry already exists for that date."""
    pass


class SamePartnerError(LedgerServiceError):
    """Sender and receiver are the same partner."""
    pass


class NotReceiverError(LedgerServiceError):
    """Only the receiving partner may approve or reject."""
    pass


class NotPartyError(LedgerServiceError):
    """Actor is not allowed to act on this transaction or rule."""
    pass


class InvalidStateError(LedgerServiceError):
    """Transition is not allowed from the current status."""
    pass


class InvalidAmountError(LedgerServiceError):
    """Amount is zero, negative or otherwise out of range."""
    pass


class InvalidScheduleError(LedgerServiceError):
    """Recurring rule dates or frequency are inconsistent."""
    pass


class NotFoundError(LedgerServiceError):
    """Record does not exist."""
    pass


class StorageError(LedgerServiceError):
    """The database failed; the whole operation was rolled back."""
    pass
