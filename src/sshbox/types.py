"""Type definitions for sshbox."""

from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.hazmat.primitives.asymmetric import rsa

from .constants import (
    DEFAULT_ARMOR_WIDTH,
    DEFAULT_MAX_KEY_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_RETRY_STATUS_CODES,
    DEFAULT_TIMEOUT_MS,
)
from .errors import InvalidKeyFormatError


@dataclass
class SSHBoxConfig:
    """Runtime configuration for sshbox.

    Attributes:
        timeout: HTTP timeout for remote key fetches in milliseconds.
        max_retries: Maximum number of retry attempts for remote key fetches.
        retry_delay: Initial retry delay in milliseconds.
        retry_on_status_codes: HTTP status codes to retry on.
        max_key_size: Largest key file or response body accepted, in bytes.
        max_input_size: Largest source file accepted, in bytes. None means no limit.
        armor_width: Column width of armored output.
    """

    timeout: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: int = DEFAULT_RETRY_DELAY_MS
    retry_on_status_codes: tuple[int, ...] = DEFAULT_RETRY_STATUS_CODES
    max_key_size: int = DEFAULT_MAX_KEY_SIZE
    max_input_size: int | None = None
    armor_width: int = DEFAULT_ARMOR_WIDTH


@dataclass(frozen=True)
class PublicKeyMaterial:
    """RSA public key decoded from the SSH wire format.

    Attributes:
        modulus: The RSA modulus n.
        exponent: The RSA public exponent e.
    """

    modulus: int
    exponent: int

    @property
    def key_size(self) -> int:
        """Modulus size in bits."""
        return self.modulus.bit_length()

    @property
    def key_size_bytes(self) -> int:
        """Modulus size in bytes; also the length of every locked key."""
        return (self.key_size + 7) // 8

    def to_public_key(self) -> rsa.RSAPublicKey:
        """Build a cryptography RSA public key from the numbers.

        Raises:
            InvalidKeyFormatError: If the numbers do not form a valid RSA key.
        """
        try:
            return rsa.RSAPublicNumbers(self.exponent, self.modulus).public_key()
        except ValueError as e:
            raise InvalidKeyFormatError(f"Invalid RSA public key: {e}") from e


@dataclass(frozen=True)
class PrivateKeyMaterial:
    """RSA private key loaded from a local armored key file."""

    key: rsa.RSAPrivateKey = field(repr=False)

    @property
    def key_size_bytes(self) -> int:
        return (self.key.key_size + 7) // 8


@dataclass(frozen=True)
class SymmetricKey:
    """Ephemeral AES-256 key generated for a single seal operation."""

    value: bytes = field(repr=False)


@dataclass(frozen=True)
class SealedContainer:
    """The two ciphertexts that make up one encrypted file.

    Attributes:
        locked_key: The symmetric key wrapped with RSA-OAEP. Always encoded first.
        box: Nonce, AES-256-GCM ciphertext and tag.
    """

    locked_key: bytes
    box: bytes
