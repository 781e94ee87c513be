"""Tests for SemVer parsing, formatting and ordering."""

import pytest

from semver_repo.semver import (
    InvalidIntegerError,
    ParseError,
    SemVer,
    WrongPartCountError,
)


def test_parse_simple():
    v = SemVer.parse("1.2.3")
    assert (v.major, v.minor, v.patch) == (1, 2, 3)


def test_format_then_parse_gives_same_version():
    for parts in [(0, 0, 0), (1, 0, 0), (12, 34, 56), (65535, 65535, 65535)]:
        v = SemVer(*parts)
        assert SemVer.parse(str(v)) == v


def test_display():
    assert str(SemVer.new(2, 0, 5)) == "2.0.5"


def test_default_is_one_zero_zero():
    assert SemVer.default() == SemVer(1, 0, 0)
    assert SemVer.new(3) == SemVer(3, 0, 0)


def test_ordering_chain():
    chain = [SemVer.parse(s) for s in ["1.0.0", "1.0.1", "1.1.0", "2.0.0"]]
    for lower, higher in zip(chain, chain[1:]):
        assert lower < higher
        assert higher > lower
    assert sorted(reversed(chain)) == chain


def test_ordering_is_componentwise_not_lexical():
    assert SemVer.parse("1.10.0") > SemVer.parse("1.9.0")
    assert SemVer.parse("2.0.0") > SemVer.parse("1.65535.65535")


def test_compare():
    a = SemVer(1, 0, 0)
    assert a.compare(SemVer(1, 0, 1)) == -1
    assert a.compare(SemVer(1, 0, 0)) == 0
    assert SemVer(2, 0, 0).compare(a) == 1


def test_equal_versions_hash_equal():
    assert len({SemVer(1, 2, 3), SemVer.parse("1.2.3")}) == 1


def test_wrong_part_count():
    for text in ["1.2", "1.2.3.4", "", "1"]:
        with pytest.raises(WrongPartCountError) as excinfo:
            SemVer.parse(text)
        assert excinfo.value.count == len(text.split("."))


def test_invalid_integer():
    for text in ["1.x.3", "1..3", "-1.0.0", "1.0.+2", " 1.0.0", "1.0.0 ", "65536.0.0"]:
        with pytest.raises(InvalidIntegerError):
            SemVer.parse(text)


def test_parse_errors_are_value_errors():
    with pytest.raises(ValueError):
        SemVer.parse("one.two.three")
    assert issubclass(WrongPartCountError, ParseError)


def test_component_out_of_range():
    with pytest.raises(ValueError):
        SemVer(1, -1, 0)
    with pytest.raises(ValueError):
        SemVer(70000, 0, 0)


def test_from_parts():
    assert SemVer.from_parts([4, 5, 6]) == SemVer(4, 5, 6)
    with pytest.raises(WrongPartCountError):
        SemVer.from_parts([1, 2])


def test_dict_form():
    v = SemVer(1, 2, 3)
    assert v.to_dict() == {"major": 1, "minor": 2, "patch": 3}
    assert SemVer.from_dict(v.to_dict()) == v
