"""Profile domain entity."""

from dataclasses import dataclass

from core.exceptions import CounterOverflowError
from domain.entities.address import ADDRESS_LENGTH, Address
from domain.entities.record import (
    DISCRIMINATOR_LENGTH,
    U64_MAX,
    RecordReader,
    RecordWriter,
    discriminator,
)

MAX_HANDLE_LEN = 32  # bytes


@dataclass
class Profile:
    """Domain entity for a user's single profile record.

    ``post_count`` is both a statistic and the sequence source for post
    addresses. It only ever grows.
    """

    owner: Address
    handle: str = ""
    post_count: int = 0
    derivation_nonce: int = 0

    DISCRIMINATOR = discriminator("Profile")
    SPACE = (
        DISCRIMINATOR_LENGTH
        + ADDRESS_LENGTH  # owner
        + 4 + MAX_HANDLE_LEN  # handle
        + 8  # post_count
        + 1  # derivation_nonce
    )

    def issue_sequence_id(self) -> int:
        """Hand out the next post sequence id and advance the counter."""
        if self.post_count >= U64_MAX:
            raise CounterOverflowError()
        sequence_id = self.post_count
        self.post_count += 1
        return sequence_id

    def to_bytes(self) -> bytes:
        return (
            RecordWriter(self.DISCRIMINATOR)
            .address(self.owner)
            .string(self.handle)
            .u64(self.post_count)
            .u8(self.derivation_nonce)
            .finish(self.SPACE)
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Profile":
        reader = RecordReader(data, cls.DISCRIMINATOR, "profile")
        return cls(
            owner=reader.address(),
            handle=reader.string(MAX_HANDLE_LEN),
            post_count=reader.u64(),
            derivation_nonce=reader.u8(),
        )
