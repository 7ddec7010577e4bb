"""Tests for crev_trust.identity — Identity."""
from __future__ import annotations

import pytest

from crev_trust.crypto.keys import Ed25519KeyManager
from crev_trust.identity import Identity


class TestIdentityEquality:
    def test_display_name_ignored_for_equality(self) -> None:
        assert Identity("abc", display_name="alice") == Identity("abc", display_name="bob")

    def test_display_name_ignored_for_hash(self) -> None:
        assert hash(Identity("abc", "alice")) == hash(Identity("abc"))

    def test_ordering_by_id(self) -> None:
        ids = [Identity("c"), Identity("a"), Identity("b")]
        assert [i.id for i in sorted(ids)] == ["a", "b", "c"]

    def test_empty_id_raises(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            Identity("")

    def test_frozen(self) -> None:
        identity = Identity("abc")
        with pytest.raises(AttributeError):
            identity.id = "other"  # type: ignore[misc]


class TestPublicKeyEncoding:
    def test_round_trip_through_id(self) -> None:
        _, public_key = Ed25519KeyManager().generate_keypair()
        identity = Identity.from_public_key(public_key, display_name="alice")
        assert identity.public_key_bytes() == public_key
        assert identity.display_name == "alice"

    def test_id_has_no_padding(self) -> None:
        _, public_key = Ed25519KeyManager().generate_keypair()
        assert "=" not in Identity.from_public_key(public_key).id

    def test_non_key_id_raises(self) -> None:
        with pytest.raises(ValueError):
            Identity("alice").public_key_bytes()

    def test_wrong_length_raises(self) -> None:
        short = Identity.from_public_key(b"\x01" * 16)
        with pytest.raises(ValueError, match="expected 32"):
            short.public_key_bytes()


class TestIdentitySerialization:
    def test_to_dict_omits_missing_name(self) -> None:
        assert Identity("abc").to_dict() == {"id": "abc"}

    def test_from_dict_round_trip(self) -> None:
        identity = Identity("abc", "alice")
        restored = Identity.from_dict(identity.to_dict())
        assert restored == identity
        assert restored.display_name == "alice"

    def test_label_prefers_display_name(self) -> None:
        assert Identity("abc", "alice").label() == "alice"
        assert Identity("abc").label() == "abc"
