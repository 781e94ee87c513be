"""Tests for crate data models."""

import pytest

from semver_repo.errors import InvalidVersionError
from semver_repo.models import Crate, CrateKey, CrateKind, Metadata, unique_by_name
from semver_repo.semver import SemVer


def _linux() -> Crate:
    return Crate(Metadata("linux.exe", "Linus Torvalds", CrateKind.BINARY))


def test_crate_creation():
    crate = _linux()
    assert crate.name == "linux.exe"
    assert crate.metadata.author == "Linus Torvalds"
    assert crate.metadata.kind == CrateKind.BINARY
    assert crate.releases == ()
    assert crate.latest is None


def test_metadata_requires_name():
    with pytest.raises(ValueError):
        Metadata("", "nobody", CrateKind.LIBRARY)


def test_metadata_is_immutable():
    md = Metadata("hello", "someone")
    with pytest.raises(AttributeError):
        md.name = "other"


def test_first_release_always_accepted():
    crate = _linux()
    crate.add_release(SemVer(0, 0, 1))
    assert crate.releases == (SemVer(0, 0, 1),)


def test_release_must_be_strictly_newer():
    crate = _linux()
    crate.add_release(SemVer(1, 0, 0))

    with pytest.raises(InvalidVersionError):
        crate.add_release(SemVer(1, 0, 0))
    with pytest.raises(InvalidVersionError):
        crate.add_release(SemVer(0, 9, 0))
    assert crate.releases == (SemVer(1, 0, 0),)

    crate.add_release(SemVer(1, 0, 1))
    assert crate.latest == SemVer(1, 0, 1)
    assert crate.releases == (SemVer(1, 0, 0), SemVer(1, 0, 1))


def test_releases_cannot_be_mutated_from_outside():
    crate = _linux()
    crate.add_release(SemVer(1, 0, 0))
    releases = crate.releases
    assert isinstance(releases, tuple)
    assert crate.releases == (SemVer(1, 0, 0),)


def test_key_is_name_only():
    crt = _linux()
    crt2 = Crate(Metadata("linux.exe", "Someone Else", CrateKind.LIBRARY))
    crt2.add_release(SemVer(1, 2, 3))

    assert crt.key == crt2.key
    assert hash(crt.key) == hash(crt2.key)
    assert {crt.key} == {crt2.key}
    assert crt.key == CrateKey("linux.exe")


def test_crate_equality_compares_content():
    crt = _linux()
    crt2 = _linux()
    assert crt == crt2
    crt2.add_release(SemVer(1, 2, 3))
    assert crt != crt2


def test_unique_by_name_collapses_same_name():
    crt = _linux()
    crt2 = _linux()
    crt2.add_release(SemVer(1, 2, 3))
    other = Crate(Metadata("LINUX.EXE!!", "LINUS TORVALDS!!!!!"))

    unique = unique_by_name([crt, crt2, other])
    assert len(unique) == 2
    assert unique[0] is crt
    assert {c.key for c in unique} == {CrateKey("linux.exe"), CrateKey("LINUX.EXE!!")}


def test_to_dict_from_dict():
    crate = _linux()
    crate.add_release(SemVer(1, 0, 0))
    crate.add_release(SemVer(1, 1, 0))

    data = crate.to_dict()
    assert data["metadata"] == {"name": "linux.exe", "author": "Linus Torvalds", "kind": "Binary"}
    assert data["release_history"][1] == {"major": 1, "minor": 1, "patch": 0}
    assert Crate.from_dict(data) == crate


def test_from_dict_rejects_unordered_history():
    data = {
        "metadata": {"name": "x", "author": "y", "kind": "Library"},
        "release_history": [
            {"major": 2, "minor": 0, "patch": 0},
            {"major": 1, "minor": 0, "patch": 0},
        ],
    }
    with pytest.raises(InvalidVersionError):
        Crate.from_dict(data)
