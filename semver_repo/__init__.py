"""semver_repo — a minimal crate registry.

The package provides:
- SemVer: parseable, totally ordered ``major.minor.patch`` versions
- Crates: metadata plus a strictly increasing release history
- Repository: name-keyed store, loaded on open and saved on close
- A line-oriented JSON protocol with a TCP server and client
"""

__version__ = "0.1.0"

from semver_repo.errors import (
    AlreadyExistsError,
    InvalidVersionError,
    NotFoundError,
    PersistenceError,
    RepoError,
    RepoErrorKind,
)
from semver_repo.models import Crate, CrateKey, CrateKind, Metadata, unique_by_name
from semver_repo.repository import Repository, load, save
from semver_repo.semver import InvalidIntegerError, ParseError, SemVer, WrongPartCountError

__all__ = [
    "AlreadyExistsError",
    "Crate",
    "CrateKey",
    "CrateKind",
    "InvalidIntegerError",
    "InvalidVersionError",
    "Metadata",
    "NotFoundError",
    "ParseError",
    "PersistenceError",
    "RepoError",
    "RepoErrorKind",
    "Repository",
    "SemVer",
    "WrongPartCountError",
    "load",
    "save",
    "unique_by_name",
]
