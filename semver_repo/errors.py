"""Failure modes of repository operations."""

from __future__ import annotations

from enum import Enum


class RepoErrorKind(Enum):
    """The three ways a repository operation can fail."""

    NOT_FOUND = "NotFound"
    INVALID_VERSION = "InvalidVersion"
    ALREADY_EXISTS = "AlreadyExists"


class RepoError(Exception):
    """Base class for repository operation failures."""

    kind: RepoErrorKind

    @staticmethod
    def from_kind(kind: RepoErrorKind, message: str = "") -> RepoError:
        """Build the exception subclass that matches ``kind``."""
        cls = _BY_KIND[kind]
        return cls(message) if message else cls()


class NotFoundError(RepoError):
    kind = RepoErrorKind.NOT_FOUND

    def __init__(self, message: str = "not found"):
        super().__init__(message)


class InvalidVersionError(RepoError):
    kind = RepoErrorKind.INVALID_VERSION

    def __init__(self, message: str = "invalid version"):
        super().__init__(message)


class AlreadyExistsError(RepoError):
    kind = RepoErrorKind.ALREADY_EXISTS

    def __init__(self, message: str = "already exists"):
        super().__init__(message)


class PersistenceError(Exception):
    """Raised when the repository cannot be written to its store."""


_BY_KIND: dict[RepoErrorKind, type[RepoError]] = {
    RepoErrorKind.NOT_FOUND: NotFoundError,
    RepoErrorKind.INVALID_VERSION: InvalidVersionError,
    RepoErrorKind.ALREADY_EXISTS: AlreadyExistsError,
}
