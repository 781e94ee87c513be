"""Crate data models — metadata, release history, and name-keyed identity."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from semver_repo.errors import InvalidVersionError
from semver_repo.semver import SemVer


class CrateKind(Enum):
    """What a crate builds into."""

    BINARY = "Binary"
    LIBRARY = "Library"


@dataclass(frozen=True)
class Metadata:
    """Descriptive facts about a crate. ``name`` is the registry key."""

    name: str
    author: str
    kind: CrateKind = CrateKind.BINARY

    def __post_init__(self):
        if not self.name:
            raise ValueError("crate name cannot be empty")

    def to_dict(self) -> dict:
        return {"name": self.name, "author": self.author, "kind": self.kind.value}

    @classmethod
    def from_dict(cls, data: dict) -> Metadata:
        return cls(
            name=data["name"],
            author=data["author"],
            kind=CrateKind(data["kind"]),
        )


@dataclass(frozen=True)
class CrateKey:
    """Identity of a crate: its name and nothing else.

    Use this wherever two crates should count as the same entry regardless
    of author or history, e.g. ``{c.key for c in crates}``.
    """

    name: str


@dataclass
class Crate:
    """A named crate and its strictly increasing release history."""

    metadata: Metadata
    _history: list[SemVer] = field(default_factory=list, repr=False)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def key(self) -> CrateKey:
        return CrateKey(self.metadata.name)

    @property
    def releases(self) -> tuple[SemVer, ...]:
        return tuple(self._history)

    @property
    def latest(self) -> SemVer | None:
        return self._history[-1] if self._history else None

    def add_release(self, version: SemVer) -> None:
        """Append ``version`` if it is newer than every existing release.

        Raises ``InvalidVersionError`` and leaves the history untouched
        otherwise. An empty history accepts any version.
        """
        latest = self.latest
        if latest is not None and not version > latest:
            raise InvalidVersionError(
                f"{self.name}: {version} is not newer than {latest}"
            )
        self._history.append(version)

    def to_dict(self) -> dict:
        return {
            "metadata": self.metadata.to_dict(),
            "release_history": [v.to_dict() for v in self._history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Crate:
        crate = cls(Metadata.from_dict(data["metadata"]))
        for version in data["release_history"]:
            crate.add_release(SemVer.from_dict(version))
        return crate

    def __repr__(self) -> str:
        releases = ", ".join(str(v) for v in self._history)
        return f"Crate({self.metadata!r}, releases=[{releases}])"


def unique_by_name(crates: Iterable[Crate]) -> list[Crate]:
    """Collapse ``crates`` to one per name, keeping the first seen."""
    seen: dict[CrateKey, Crate] = {}
    for crate in crates:
        seen.setdefault(crate.key, crate)
    return list(seen.values())
