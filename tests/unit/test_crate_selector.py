"""Tests for crev_trust.proofs.selector — CrateSelector."""
from __future__ import annotations

import pytest

from crev_trust.proofs.selector import CrateSelector


class TestMatches:
    def test_universal_selector_matches_anything(self) -> None:
        assert CrateSelector().matches(CrateSelector("foo", "1.0"))

    def test_name_only_matches_every_version(self) -> None:
        selector = CrateSelector("foo")
        assert selector.matches(CrateSelector("foo", "1.0"))
        assert selector.matches(CrateSelector("foo", "2.0"))

    def test_name_mismatch(self) -> None:
        assert not CrateSelector("foo").matches(CrateSelector("bar", "1.0"))

    def test_exact_version(self) -> None:
        selector = CrateSelector("foo", "1.0")
        assert selector.matches(CrateSelector("foo", "1.0"))
        assert not selector.matches(CrateSelector("foo", "1.1"))

    def test_proof_for_all_versions_matches_specific_selector(self) -> None:
        assert CrateSelector("foo", "1.0").matches(CrateSelector("foo"))


class TestParse:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("foo@1.0", CrateSelector("foo", "1.0")),
            ("foo", CrateSelector("foo")),
            ("*", CrateSelector()),
            ("", CrateSelector()),
        ],
    )
    def test_parse(self, text: str, expected: CrateSelector) -> None:
        assert CrateSelector.parse(text) == expected

    def test_empty_name_raises(self) -> None:
        with pytest.raises(ValueError, match="empty name"):
            CrateSelector.parse("@1.0")

    def test_empty_version_raises(self) -> None:
        with pytest.raises(ValueError, match="empty version"):
            CrateSelector.parse("foo@")

    def test_version_without_name_raises(self) -> None:
        with pytest.raises(ValueError, match="name the crate"):
            CrateSelector(version="1.0")

    def test_str_matches_parse_syntax(self) -> None:
        for text in ("foo@1.0", "foo", "*"):
            assert str(CrateSelector.parse(text)) == text
