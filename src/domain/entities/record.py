"""Record handle and binary layout helpers shared by the record entities."""

import hashlib
import struct
from dataclasses import dataclass

from core.exceptions import InvalidRecordError
from domain.entities.address import ADDRESS_LENGTH, Address

DISCRIMINATOR_LENGTH = 8
U64_MAX = 2**64 - 1

_U8 = struct.Struct("<B")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


def discriminator(type_name: str) -> bytes:
    """Eight-byte type tag written at the start of every record."""
    return hashlib.sha256(f"account:{type_name}".encode()).digest()[:DISCRIMINATOR_LENGTH]


def text_length(value: str) -> int:
    """Length of ``value`` in UTF-8 bytes."""
    return len(value.encode("utf-8"))


@dataclass(frozen=True)
class RecordHandle:
    """A live allocation in the keyed store."""

    address: Address
    size: int
    deposit: int = 0


class RecordWriter:
    """Little-endian record encoder with length-prefixed strings."""

    def __init__(self, tag: bytes) -> None:
        self._parts: list[bytes] = [tag]

    def address(self, value: Address) -> "RecordWriter":
        self._parts.append(value.value)
        return self

    def u8(self, value: int) -> "RecordWriter":
        self._parts.append(_U8.pack(value))
        return self

    def u64(self, value: int) -> "RecordWriter":
        self._parts.append(_U64.pack(value))
        return self

    def string(self, value: str) -> "RecordWriter":
        raw = value.encode("utf-8")
        self._parts.append(_U32.pack(len(raw)) + raw)
        return self

    def finish(self, size: int) -> bytes:
        """Join the fields and zero-pad to the allocated ``size``."""
        data = b"".join(self._parts)
        if len(data) > size:
            raise ValueError(f"Encoded record is {len(data)} bytes, space is {size}")
        return data.ljust(size, b"\x00")


class RecordReader:
    """Decoder matching :class:`RecordWriter`."""

    def __init__(self, data: bytes, tag: bytes, record_type: str) -> None:
        self._data = data
        self._record_type = record_type
        if data[:DISCRIMINATOR_LENGTH] != tag:
            raise InvalidRecordError(record_type, "discriminator mismatch")
        self._offset = DISCRIMINATOR_LENGTH

    def _take(self, length: int) -> bytes:
        end = self._offset + length
        if end > len(self._data):
            raise InvalidRecordError(self._record_type, "unexpected end of data")
        chunk = self._data[self._offset:end]
        self._offset = end
        return chunk

    def address(self) -> Address:
        return Address(self._take(ADDRESS_LENGTH))

    def u8(self) -> int:
        return int(_U8.unpack(self._take(_U8.size))[0])

    def u64(self) -> int:
        return int(_U64.unpack(self._take(_U64.size))[0])

    def string(self, max_length: int) -> str:
        (length,) = _U32.unpack(self._take(_U32.size))
        if length > max_length:
            raise InvalidRecordError(self._record_type, "string exceeds its budget")
        try:
            return self._take(length).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidRecordError(self._record_type, "string is not UTF-8") from e
