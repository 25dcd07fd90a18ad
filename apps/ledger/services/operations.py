"""Transactional boundary shared by every balance-mutating service."""
import functools
import logging

from django.db import DatabaseError, transaction

from .exceptions import StorageError

logger = logging.getLogger(__name__)


def ledger_operation(func):
    """
    Run ``func`` inside a single atomic block.

    A record change and its balance effect commit together or not at
    all. Database failures surface as StorageError once the block has
    rolled back; domain errors pass through unchanged.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            with transaction.atomic():
                return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Storage failure in %s", func.__name__)
            raise StorageError(f"{func.__name__} failed: {exc}") from exc

    return wrapper
