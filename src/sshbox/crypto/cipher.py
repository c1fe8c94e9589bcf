"""Hybrid RSA-OAEP / AES-256-GCM sealing for sshbox.

The protocol is fixed: the symmetric key is wrapped with RSA-OAEP using
SHA-256 for both the hash and MGF1, and the message is encrypted with
AES-256-GCM. The box is ``nonce || ciphertext || tag``. Nothing about the
algorithms is recorded in the container.
"""

from __future__ import annotations

import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import (
    AuthenticationError,
    EncryptionError,
    InvalidKeyError,
    KeyGenerationError,
)
from ..types import PrivateKeyMaterial, PublicKeyMaterial, SealedContainer, SymmetricKey
from .constants import (
    AES_GCM_NONCE_SIZE,
    BOX_OVERHEAD,
    OAEP_HASH_SIZE,
    SYMMETRIC_KEY_SIZE,
)

logger = logging.getLogger("sshbox")


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def _random_bytes(size: int) -> bytes:
    """Read from the OS random source.

    Raises:
        KeyGenerationError: If the random source is unavailable.
    """
    try:
        return os.urandom(size)
    except (NotImplementedError, OSError) as e:
        raise KeyGenerationError(f"Failed to generate the box key: {e}") from e


def generate_symmetric_key() -> SymmetricKey:
    """Generate a fresh AES-256 key.

    Returns:
        A new random SymmetricKey.

    Raises:
        KeyGenerationError: If the random source is unavailable.
    """
    return SymmetricKey(_random_bytes(SYMMETRIC_KEY_SIZE))


def max_wrap_size(key_size_bytes: int) -> int:
    """Largest payload RSA-OAEP-SHA256 can wrap under a modulus of the given size."""
    return key_size_bytes - 2 * OAEP_HASH_SIZE - 2


def seal(message: bytes, pub: PublicKeyMaterial) -> SealedContainer:
    """Encrypt a message to an RSA public key.

    A new symmetric key and nonce are drawn for every call, so sealing the
    same message twice never yields the same container.

    Args:
        message: The plaintext.
        pub: The recipient's public key.

    Returns:
        The sealed container.

    Raises:
        KeyGenerationError: If the random source is unavailable.
        EncryptionError: If the key cannot be wrapped under the public key.
    """
    box_key = generate_symmetric_key()

    nonce = _random_bytes(AES_GCM_NONCE_SIZE)
    box = nonce + AESGCM(box_key.value).encrypt(nonce, message, None)

    limit = max_wrap_size(pub.key_size_bytes)
    if SYMMETRIC_KEY_SIZE > limit:
        raise EncryptionError(
            f"RSA encryption failed: {pub.key_size}-bit key can wrap at most "
            f"{max(limit, 0)} bytes, need {SYMMETRIC_KEY_SIZE}"
        )

    try:
        locked_key = pub.to_public_key().encrypt(box_key.value, _oaep())
    except ValueError as e:
        raise EncryptionError(f"RSA encryption failed: {e}") from e

    logger.debug("Sealed %d bytes under %d-bit key", len(message), pub.key_size)
    return SealedContainer(locked_key=locked_key, box=box)


def open_box(container: SealedContainer, priv: PrivateKeyMaterial) -> bytes:
    """Recover the message from a sealed container.

    Args:
        container: The sealed container.
        priv: The recipient's private key.

    Returns:
        The plaintext.

    Raises:
        InvalidKeyError: If the locked key cannot be unwrapped.
        AuthenticationError: If the box fails its integrity check.
    """
    expected = priv.key_size_bytes
    if len(container.locked_key) != expected:
        raise InvalidKeyError(
            f"RSA decryption failed: locked key is {len(container.locked_key)} bytes, "
            f"expected {expected}"
        )

    try:
        key_bytes = priv.key.decrypt(container.locked_key, _oaep())
    except ValueError as e:
        raise InvalidKeyError(f"RSA decryption failed: {e}") from e

    if len(key_bytes) != SYMMETRIC_KEY_SIZE:
        raise InvalidKeyError(
            f"RSA decryption failed: box key is {len(key_bytes)} bytes, "
            f"expected {SYMMETRIC_KEY_SIZE}"
        )
    box_key = SymmetricKey(key_bytes)

    if len(container.box) < BOX_OVERHEAD:
        raise AuthenticationError(
            f"Failed to open box: {len(container.box)} bytes is shorter than "
            f"the {BOX_OVERHEAD}-byte nonce and tag"
        )

    nonce = container.box[:AES_GCM_NONCE_SIZE]
    ciphertext = container.box[AES_GCM_NONCE_SIZE:]
    try:
        return AESGCM(box_key.value).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise AuthenticationError("Failed to open box: authentication failed") from e
