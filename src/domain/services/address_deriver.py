"""Deterministic record address derivation."""

import hashlib
import struct
from collections.abc import Sequence
from dataclasses import dataclass

from core.exceptions import AddressDerivationError
from domain.entities.address import Address

PROFILE_NAMESPACE = b"user_profile"
POST_NAMESPACE = b"post"

MAX_SEED_LENGTH = 32
MAX_SEEDS = 16
DERIVATION_MARKER = b"ProgramDerivedAddress"

# ed25519 field prime and curve constant
_P = 2**255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P


def is_on_curve(candidate: bytes) -> bool:
    """Whether ``candidate`` decodes as a compressed ed25519 point.

    Such addresses could have a private key, so they are outside the set of
    addresses the store accepts for derived records.
    """
    y = int.from_bytes(candidate, "little") & ((1 << 255) - 1)
    y %= _P
    y2 = y * y % _P
    u = (y2 - 1) % _P
    v = (_D * y2 + 1) % _P
    x2 = u * pow(v, _P - 2, _P) % _P
    if x2 == 0:
        return True
    return pow(x2, (_P - 1) // 2, _P) == 1


@dataclass(frozen=True)
class DerivedAddress:
    """A derived address and the nonce that produced it."""

    address: Address
    nonce: int


def encode_sequence_id(sequence_id: int) -> bytes:
    """Fixed-width u64 little-endian seed for a post sequence id."""
    return struct.pack("<Q", sequence_id)


class AddressDeriver:
    """Derives record addresses from a namespace tag and key parts."""

    def __init__(self, program_id: Address) -> None:
        self._program_id = program_id

    def address_for(
        self, namespace: bytes, key_parts: Sequence[bytes], nonce: int
    ) -> Address:
        """Compute the address for one specific nonce."""
        seeds = self._check_seeds(namespace, key_parts)
        if not 0 <= nonce <= 255:
            raise AddressDerivationError("Nonce must fit in one byte")
        candidate = self._candidate(seeds, nonce)
        if is_on_curve(candidate):
            raise AddressDerivationError("Derived address lies on the curve")
        return Address(candidate)

    def derive(self, namespace: bytes, key_parts: Sequence[bytes]) -> DerivedAddress:
        """Find the highest nonce whose address is off-curve."""
        seeds = self._check_seeds(namespace, key_parts)
        for nonce in range(255, 0, -1):
            candidate = self._candidate(seeds, nonce)
            if not is_on_curve(candidate):
                return DerivedAddress(address=Address(candidate), nonce=nonce)
        raise AddressDerivationError()

    def profile_address(self, owner: Address) -> DerivedAddress:
        return self.derive(PROFILE_NAMESPACE, [owner.value])

    def post_address(self, profile_address: Address, sequence_id: int) -> DerivedAddress:
        return self.derive(
            POST_NAMESPACE, [profile_address.value, encode_sequence_id(sequence_id)]
        )

    def _check_seeds(self, namespace: bytes, key_parts: Sequence[bytes]) -> list[bytes]:
        seeds = [namespace, *key_parts]
        # the nonce byte counts as a seed
        if len(seeds) + 1 > MAX_SEEDS:
            raise AddressDerivationError(f"At most {MAX_SEEDS} seeds are allowed")
        if any(len(seed) > MAX_SEED_LENGTH for seed in seeds):
            raise AddressDerivationError(
                f"Seeds must be at most {MAX_SEED_LENGTH} bytes"
            )
        return seeds

    def _candidate(self, seeds: list[bytes], nonce: int) -> bytes:
        hasher = hashlib.sha256()
        for seed in seeds:
            hasher.update(seed)
        hasher.update(bytes([nonce]))
        hasher.update(self._program_id.value)
        hasher.update(DERIVATION_MARKER)
        return hasher.digest()
