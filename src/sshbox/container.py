"""Sealed container serialization for sshbox.

The binary form is the DER encoding of::

    SEQUENCE {
        lockedKey OCTET STRING,
        box       OCTET STRING
    }

The armored form wraps that DER record in a ``SSHBOX ENCRYPTED FILE``
armor envelope. Decoding tries the binary form first and falls back to the
armored form, so callers never have to say which one they hold.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .armor import decode_armor, encode_armor
from .constants import DEFAULT_ARMOR_WIDTH
from .crypto.constants import CONTAINER_ARMOR_LABEL
from .errors import InvalidContainerError
from .types import SealedContainer

logger = logging.getLogger("sshbox")

_SEQUENCE_TAG = 0x30
_OCTET_STRING_TAG = 0x04
_CONTAINER_FIELD_COUNT = 2
# Long-form lengths beyond 4 bytes cannot describe an in-memory container
_MAX_LENGTH_OCTETS = 4


class _MalformedRecordError(Exception):
    """Raised inside the DER parser; never leaves this module."""


@dataclass(frozen=True)
class DecodeAttempt:
    """Outcome of one decode strategy.

    Attributes:
        format: Name of the strategy ("binary" or "armored").
        container: The decoded container on success.
        error: Why the strategy rejected the input on failure.
    """

    format: str
    container: SealedContainer | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.container is not None


def _encode_length(length: int) -> bytes:
    if length < 0x80:
        return bytes([length])
    body = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([0x80 | len(body)]) + body


def _encode_tlv(tag: int, value: bytes) -> bytes:
    return bytes([tag]) + _encode_length(len(value)) + value


def _read_tlv(data: bytes, offset: int) -> tuple[int, int, int]:
    """Read one DER element header.

    Returns:
        Tuple of (tag, value start offset, value end offset).
    """
    if offset >= len(data):
        raise _MalformedRecordError(f"truncated element at offset {offset}")
    tag = data[offset]
    offset += 1

    if offset >= len(data):
        raise _MalformedRecordError("truncated length")
    first = data[offset]
    offset += 1

    if first < 0x80:
        length = first
    elif first == 0x80:
        raise _MalformedRecordError("indefinite length is not DER")
    else:
        count = first & 0x7F
        if count > _MAX_LENGTH_OCTETS:
            raise _MalformedRecordError(f"length uses {count} octets")
        if offset + count > len(data):
            raise _MalformedRecordError("truncated length")
        length_bytes = data[offset : offset + count]
        offset += count
        length = int.from_bytes(length_bytes, "big")
        if length_bytes[0] == 0 or length < 0x80:
            raise _MalformedRecordError("non-minimal length encoding")

    if length > len(data) - offset:
        raise _MalformedRecordError(
            f"element declares {length} bytes, only {len(data) - offset} remain"
        )
    return tag, offset, offset + length


def _parse_record(data: bytes) -> SealedContainer:
    tag, start, end = _read_tlv(data, 0)
    if tag != _SEQUENCE_TAG:
        raise _MalformedRecordError(f"expected SEQUENCE, found tag 0x{tag:02x}")
    if end != len(data):
        raise _MalformedRecordError(f"{len(data) - end} trailing bytes after record")

    fields: list[bytes] = []
    offset = start
    while offset < end:
        tag, value_start, value_end = _read_tlv(data, offset)
        if tag != _OCTET_STRING_TAG:
            raise _MalformedRecordError(f"expected OCTET STRING, found tag 0x{tag:02x}")
        fields.append(data[value_start:value_end])
        offset = value_end

    if len(fields) != _CONTAINER_FIELD_COUNT:
        raise _MalformedRecordError(
            f"expected {_CONTAINER_FIELD_COUNT} fields, found {len(fields)}"
        )
    return SealedContainer(locked_key=fields[0], box=fields[1])


def _decode_binary(data: bytes) -> DecodeAttempt:
    try:
        return DecodeAttempt("binary", container=_parse_record(data))
    except _MalformedRecordError as e:
        return DecodeAttempt("binary", error=str(e))


def _decode_armored(data: bytes) -> DecodeAttempt:
    block = decode_armor(data)
    if block is None:
        return DecodeAttempt("armored", error="no armored block found")
    if block.label != CONTAINER_ARMOR_LABEL:
        return DecodeAttempt("armored", error=f"unexpected armor label {block.label!r}")
    try:
        return DecodeAttempt("armored", container=_parse_record(block.payload))
    except _MalformedRecordError as e:
        return DecodeAttempt("armored", error=f"armored body: {e}")


# Binary first: rejecting DER is cheap, scanning for armor is not.
_DECODE_ATTEMPTS: tuple[Callable[[bytes], DecodeAttempt], ...] = (
    _decode_binary,
    _decode_armored,
)


def encode_container(
    container: SealedContainer,
    armor: bool = False,
    width: int = DEFAULT_ARMOR_WIDTH,
) -> bytes:
    """Serialize a sealed container.

    Args:
        container: The container to serialize.
        armor: Whether to wrap the DER record in a text envelope.
        width: Column width of the armored body.

    Returns:
        The DER record, or the armored block if ``armor`` is set.
    """
    record = _encode_tlv(
        _SEQUENCE_TAG,
        _encode_tlv(_OCTET_STRING_TAG, container.locked_key)
        + _encode_tlv(_OCTET_STRING_TAG, container.box),
    )
    if armor:
        return encode_armor(CONTAINER_ARMOR_LABEL, record, width=width)
    return record


def decode_container(data: bytes) -> SealedContainer:
    """Deserialize a sealed container in either format.

    Args:
        data: DER record or armored block.

    Returns:
        The decoded container.

    Raises:
        InvalidContainerError: If no decode strategy accepts the data.
    """
    data = bytes(data)
    reasons: list[str] = []
    for decode in _DECODE_ATTEMPTS:
        attempt = decode(data)
        if attempt.container is not None:
            logger.debug("Decoded %s container", attempt.format)
            return attempt.container
        reasons.append(f"{attempt.format}: {attempt.error}")

    raise InvalidContainerError("Invalid box: " + "; ".join(reasons), tuple(reasons))
