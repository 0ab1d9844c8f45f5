"""Unit tests for AddressDeriver."""

import pytest

from core.exceptions import AddressDerivationError
from domain.entities.address import Address
from domain.services.address_deriver import (
    POST_NAMESPACE,
    PROFILE_NAMESPACE,
    AddressDeriver,
    encode_sequence_id,
    is_on_curve,
)

# Compressed ed25519 base point and identity point
BASE_POINT = bytes.fromhex("58" + "66" * 31)
IDENTITY_POINT = bytes([1]) + bytes(31)


class TestIsOnCurve:
    def test_base_point_is_on_curve(self):
        assert is_on_curve(BASE_POINT)

    def test_identity_point_is_on_curve(self):
        assert is_on_curve(IDENTITY_POINT)


class TestDerive:
    def test_is_deterministic(self, deriver: AddressDeriver, owner: Address):
        first = deriver.profile_address(owner)
        second = deriver.profile_address(owner)

        assert first == second

    def test_distinct_owners_get_distinct_profiles(
        self, deriver: AddressDeriver, owner: Address, intruder: Address
    ):
        assert deriver.profile_address(owner).address != deriver.profile_address(intruder).address

    def test_result_is_off_curve_with_valid_nonce(self, deriver: AddressDeriver, owner: Address):
        derived = deriver.profile_address(owner)

        assert 1 <= derived.nonce <= 255
        assert not is_on_curve(derived.address.value)

    def test_nonce_reproduces_address(self, deriver: AddressDeriver, owner: Address):
        derived = deriver.profile_address(owner)

        rebuilt = deriver.address_for(PROFILE_NAMESPACE, [owner.value], derived.nonce)

        assert rebuilt == derived.address

    def test_namespaces_are_separated(self, deriver: AddressDeriver, owner: Address):
        as_profile = deriver.derive(PROFILE_NAMESPACE, [owner.value])
        as_post = deriver.derive(POST_NAMESPACE, [owner.value])

        assert as_profile.address != as_post.address

    def test_program_id_separates_deployments(self, owner: Address):
        first = AddressDeriver(Address(bytes(32))).profile_address(owner)
        second = AddressDeriver(Address(bytes([1]) * 32)).profile_address(owner)

        assert first.address != second.address

    def test_post_addresses_differ_per_sequence(self, deriver: AddressDeriver, owner: Address):
        profile = deriver.profile_address(owner).address

        addresses = {deriver.post_address(profile, seq).address for seq in range(20)}

        assert len(addresses) == 20

    def test_post_address_matches_generic_derivation(
        self, deriver: AddressDeriver, owner: Address
    ):
        profile = deriver.profile_address(owner).address

        assert deriver.post_address(profile, 7) == deriver.derive(
            POST_NAMESPACE, [profile.value, encode_sequence_id(7)]
        )


class TestSeedRules:
    def test_rejects_oversized_seed(self, deriver: AddressDeriver):
        with pytest.raises(AddressDerivationError):
            deriver.derive(PROFILE_NAMESPACE, [bytes(33)])

    def test_rejects_too_many_seeds(self, deriver: AddressDeriver):
        with pytest.raises(AddressDerivationError):
            deriver.derive(PROFILE_NAMESPACE, [b"x"] * 15)

    def test_accepts_maximum_seed_count(self, deriver: AddressDeriver):
        derived = deriver.derive(PROFILE_NAMESPACE, [b"x"] * 14)

        assert derived.nonce >= 1

    def test_rejects_nonce_outside_byte(self, deriver: AddressDeriver, owner: Address):
        with pytest.raises(AddressDerivationError):
            deriver.address_for(PROFILE_NAMESPACE, [owner.value], 256)


class TestEncodeSequenceId:
    def test_is_fixed_width_little_endian(self):
        assert encode_sequence_id(1) == b"\x01" + bytes(7)
        assert encode_sequence_id(2**64 - 1) == b"\xff" * 8
