"""Post domain entity."""

from dataclasses import dataclass

from domain.entities.address import ADDRESS_LENGTH, Address
from domain.entities.record import (
    DISCRIMINATOR_LENGTH,
    RecordReader,
    RecordWriter,
    discriminator,
)

MAX_TITLE_LEN = 64  # bytes
MAX_CONTENT_LEN = 512  # bytes


@dataclass
class Post:
    """Domain entity for a post, keyed by its profile and sequence id."""

    owner: Address
    profile_ref: Address
    sequence_id: int
    title: str = ""
    content: str = ""
    derivation_nonce: int = 0

    DISCRIMINATOR = discriminator("Post")
    SPACE = (
        DISCRIMINATOR_LENGTH
        + ADDRESS_LENGTH  # owner
        + ADDRESS_LENGTH  # profile_ref
        + 8  # sequence_id
        + 4 + MAX_TITLE_LEN  # title
        + 4 + MAX_CONTENT_LEN  # content
        + 1  # derivation_nonce
    )

    def to_bytes(self) -> bytes:
        return (
            RecordWriter(self.DISCRIMINATOR)
            .address(self.owner)
            .address(self.profile_ref)
            .u64(self.sequence_id)
            .string(self.title)
            .string(self.content)
            .u8(self.derivation_nonce)
            .finish(self.SPACE)
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Post":
        reader = RecordReader(data, cls.DISCRIMINATOR, "post")
        return cls(
            owner=reader.address(),
            profile_ref=reader.address(),
            sequence_id=reader.u64(),
            title=reader.string(MAX_TITLE_LEN),
            content=reader.string(MAX_CONTENT_LEN),
            derivation_nonce=reader.u8(),
        )
