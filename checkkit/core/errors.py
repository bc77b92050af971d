"""Typed errors raised by the CheckKit core."""

from __future__ import annotations


class CheckKitError(Exception):
    """Base class for every error the core signals to its callers."""


class ValidationError(CheckKitError):
    """Malformed input to a create/update; raised before any store write."""


class NotFoundError(CheckKitError):
    """An update or delete referenced an id that does not exist."""

    def __init__(self, entity: str, identifier) -> None:
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier


class DecryptionError(CheckKitError):
    """Wrong key or corrupted ciphertext."""


class InvalidBackupError(DecryptionError):
    """A backup blob that cannot be decrypted or does not parse into a snapshot."""


class StorageError(CheckKitError):
    """Underlying durable-storage failure. Not retried here."""
