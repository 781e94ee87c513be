"""Three-part semantic version values with a total order.

Versions are compared lexicographically on (major, minor, patch). Each
component is an unsigned 16-bit integer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

MAX_COMPONENT = 65535


class ParseError(ValueError):
    """Raised when text is not a valid ``major.minor.patch`` version."""


class WrongPartCountError(ParseError):
    def __init__(self, count: int):
        super().__init__(f"wrong number of parts, {count} (expected: 3)")
        self.count = count


class InvalidIntegerError(ParseError):
    def __init__(self, part: str):
        super().__init__(f"could not parse integer: {part!r}")
        self.part = part


@dataclass(frozen=True, order=True)
class SemVer:
    """A ``major.minor.patch`` version.

    Field order drives the generated comparisons, so ``order=True`` gives
    exactly the componentwise, major-first ordering.
    """

    major: int
    minor: int
    patch: int

    def __post_init__(self):
        for label in ("major", "minor", "patch"):
            value = getattr(self, label)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{label} must be an int, got {type(value).__name__}")
            if not 0 <= value <= MAX_COMPONENT:
                raise ValueError(f"{label} out of range 0..{MAX_COMPONENT}: {value}")

    @classmethod
    def new(cls, major: int, minor: int = 0, patch: int = 0) -> SemVer:
        return cls(major, minor, patch)

    @classmethod
    def default(cls) -> SemVer:
        """The version used when none is given: ``1.0.0``."""
        return cls.new(1)

    @classmethod
    def from_parts(cls, parts: Sequence[int]) -> SemVer:
        if len(parts) != 3:
            raise WrongPartCountError(len(parts))
        return cls(*parts)

    @classmethod
    def parse(cls, text: str) -> SemVer:
        """Parse ``"M.m.p"``.

        Raises ``WrongPartCountError`` unless there are exactly three
        dot-separated segments, and ``InvalidIntegerError`` when a segment
        is not a plain run of digits within range.
        """
        parts = text.split(".")
        if len(parts) != 3:
            raise WrongPartCountError(len(parts))
        return cls(*(_parse_component(p) for p in parts))

    def compare(self, other: SemVer) -> int:
        """Return -1, 0 or 1 as this version is less, equal or greater."""
        if self < other:
            return -1
        if self > other:
            return 1
        return 0

    def to_dict(self) -> dict:
        return {"major": self.major, "minor": self.minor, "patch": self.patch}

    @classmethod
    def from_dict(cls, data: dict) -> SemVer:
        return cls(data["major"], data["minor"], data["patch"])

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _parse_component(part: str) -> int:
    # str.isdigit() also accepts superscripts and other non-ASCII digits
    if not part or not (part.isascii() and part.isdigit()):
        raise InvalidIntegerError(part)
    value = int(part)
    if value > MAX_COMPONENT:
        raise InvalidIntegerError(part)
    return value
