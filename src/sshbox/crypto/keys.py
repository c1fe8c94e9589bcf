"""SSH RSA key parsing for sshbox."""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm as BackendUnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..armor import decode_armor, encode_armor
from ..errors import InvalidKeyFormatError, UnsupportedAlgorithmError
from ..types import PrivateKeyMaterial, PublicKeyMaterial
from .constants import (
    OPENSSH_PRIVATE_KEY_LABEL,
    PKCS1_PRIVATE_KEY_LABEL,
    SSH_LENGTH_PREFIX_SIZE,
    SSH_RSA_ALGORITHM,
    SSH_RSA_FIELD_COUNT,
)
from .utils import from_base64

logger = logging.getLogger("sshbox")

_BASE64_ALPHABET = frozenset(string.ascii_letters + string.digits + "+/=")


@dataclass(frozen=True)
class PublicKeyLine:
    """Tokens of a single-line public key.

    Attributes:
        algorithm: The leading algorithm label, if one was present.
        payload: The base64 key blob.
        comment: Everything after the blob, joined by single spaces.
    """

    algorithm: str | None
    payload: str
    comment: str = ""


class _WireReader:
    """Sequential reader for SSH length-prefixed fields."""

    def __init__(self, blob: bytes) -> None:
        self._blob = blob
        self._offset = 0
        self._fields_read = 0

    def read_field(self) -> bytes:
        """Read the next field.

        Raises:
            InvalidKeyFormatError: If the length prefix or field data is truncated.
        """
        self._fields_read += 1
        remaining = len(self._blob) - self._offset
        if remaining < SSH_LENGTH_PREFIX_SIZE:
            raise InvalidKeyFormatError(
                f"Truncated public key: missing length prefix for field {self._fields_read} "
                f"of {SSH_RSA_FIELD_COUNT}"
            )

        prefix_end = self._offset + SSH_LENGTH_PREFIX_SIZE
        length = int.from_bytes(self._blob[self._offset : prefix_end], "big")
        remaining -= SSH_LENGTH_PREFIX_SIZE
        if length > remaining:
            raise InvalidKeyFormatError(
                f"Truncated public key: field {self._fields_read} declares {length} bytes, "
                f"only {remaining} remain"
            )

        self._offset = prefix_end + length
        return self._blob[prefix_end : self._offset]


def _split_key_line(tokens: list[str]) -> PublicKeyLine:
    first = tokens[0]
    if set(first) <= _BASE64_ALPHABET:
        return PublicKeyLine(algorithm=None, payload=first, comment=" ".join(tokens[1:]))

    if len(tokens) < 2:
        raise InvalidKeyFormatError(f"Missing key data after algorithm label {first!r}")
    return PublicKeyLine(algorithm=first, payload=tokens[1], comment=" ".join(tokens[2:]))


def tokenize_public_key(raw: bytes | str) -> PublicKeyLine:
    """Split a public key line into label, payload and comment.

    Blank lines and ``#`` comments are skipped. Of the remaining lines the
    first one labelled ``ssh-rsa`` or carrying no label is used, so a file
    listing several keys (``authorized_keys``, ``https://host/user.keys``)
    yields its RSA key. When no line qualifies the first line is returned.
    A leading token containing characters outside the base64 alphabet is
    taken to be the algorithm label.

    Args:
        raw: Public key file contents.

    Returns:
        The tokens of the key line.

    Raises:
        InvalidKeyFormatError: If no key line is present.
    """
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidKeyFormatError(f"Public key is not text: {e}") from e
    else:
        text = raw

    candidates = [
        line.split()
        for line in (raw_line.strip() for raw_line in text.splitlines())
        if line and not line.startswith("#")
    ]
    if not candidates:
        raise InvalidKeyFormatError("No public key found")

    for tokens in candidates:
        first = tokens[0]
        if first == SSH_RSA_ALGORITHM or set(first) <= _BASE64_ALPHABET:
            return _split_key_line(tokens)
    return _split_key_line(candidates[0])


def parse_public_key(raw: bytes | str) -> PublicKeyMaterial:
    """Decode an ssh-rsa public key.

    The blob holds three length-prefixed fields: algorithm name, public
    exponent and modulus, the integers big-endian unsigned.

    Args:
        raw: Public key line, e.g. ``ssh-rsa AAAAB3... user@host``.

    Returns:
        The decoded public key numbers.

    Raises:
        InvalidKeyFormatError: If the key cannot be decoded.
        UnsupportedAlgorithmError: If the key is not an ssh-rsa key.
    """
    line = tokenize_public_key(raw)
    if line.algorithm is not None and line.algorithm != SSH_RSA_ALGORITHM:
        raise UnsupportedAlgorithmError(line.algorithm)

    try:
        blob = from_base64(line.payload)
    except ValueError as e:
        raise InvalidKeyFormatError(f"Couldn't decode public key: {e}") from e

    reader = _WireReader(blob)
    algorithm = reader.read_field()
    if algorithm != SSH_RSA_ALGORITHM.encode("ascii"):
        raise UnsupportedAlgorithmError(algorithm.decode("ascii", errors="replace"))

    exponent = int.from_bytes(reader.read_field(), "big")
    modulus = int.from_bytes(reader.read_field(), "big")

    material = PublicKeyMaterial(modulus=modulus, exponent=exponent)
    # Rejects even, zero or otherwise unusable numbers
    material.to_public_key()

    logger.debug("Parsed %s public key (%d bits)", SSH_RSA_ALGORITHM, material.key_size)
    return material


def parse_private_key(raw: bytes | str) -> PrivateKeyMaterial:
    """Decode an armored RSA private key.

    Accepts PKCS#1 ``RSA PRIVATE KEY`` blocks and unencrypted
    ``OPENSSH PRIVATE KEY`` blocks holding an RSA key.

    Args:
        raw: Private key file contents.

    Returns:
        The loaded private key.

    Raises:
        InvalidKeyFormatError: If the envelope is missing, has the wrong
            type, is passphrase protected, or does not hold an RSA key.
    """
    block = decode_armor(raw)
    if block is None:
        raise InvalidKeyFormatError("Couldn't decode key file: no armored key found")

    if block.label not in (PKCS1_PRIVATE_KEY_LABEL, OPENSSH_PRIVATE_KEY_LABEL):
        raise InvalidKeyFormatError(f"Key is not a private key: {block.label!r}")

    if "ENCRYPTED" in block.headers.get("Proc-Type", ""):
        raise InvalidKeyFormatError("Passphrase-protected private keys are not supported")

    try:
        if block.label == PKCS1_PRIVATE_KEY_LABEL:
            key = serialization.load_der_private_key(block.payload, password=None)
        else:
            key = serialization.load_ssh_private_key(
                encode_armor(block.label, block.payload, width=70), password=None
            )
    except (ValueError, TypeError, BackendUnsupportedAlgorithm) as e:
        raise InvalidKeyFormatError(f"Failed to parse private key: {e}") from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidKeyFormatError(f"Private key is not an RSA key: {type(key).__name__}")

    logger.debug("Loaded %s (%d bits)", block.label, key.key_size)
    return PrivateKeyMaterial(key=key)
