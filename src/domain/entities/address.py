"""Address value object."""

from dataclasses import dataclass

ADDRESS_LENGTH = 32


@dataclass(frozen=True)
class Address:
    """A 32-byte identifier for a record or an owner identity."""

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != ADDRESS_LENGTH:
            raise ValueError(
                f"Address must be {ADDRESS_LENGTH} bytes, got {len(self.value)}"
            )

    @classmethod
    def from_hex(cls, text: str) -> "Address":
        """Parse the hex form produced by ``str()``."""
        return cls(bytes.fromhex(text))

    def __bytes__(self) -> bytes:
        return self.value

    def __str__(self) -> str:
        return self.value.hex()
