"""Encrypt and decrypt files with SSH keys."""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile

from .constants import OUTPUT_FILE_MODE
from .container import decode_container, encode_container
from .crypto.cipher import open_box, seal
from .errors import FileAccessError, InputTooLargeError
from .keysource import load_private_key, load_public_key
from .types import PrivateKeyMaterial, PublicKeyMaterial, SSHBoxConfig

logger = logging.getLogger("sshbox")


def _check_size(size: int, config: SSHBoxConfig, what: str) -> None:
    if config.max_input_size is not None and size > config.max_input_size:
        raise InputTooLargeError(
            f"{what} is {size} bytes, limit is {config.max_input_size}"
        )


def read_input(path: str, config: SSHBoxConfig | None = None) -> bytes:
    """Read a source file, enforcing the configured size limit.

    Raises:
        FileAccessError: If the file cannot be read.
        InputTooLargeError: If the file exceeds ``max_input_size``.
    """
    config = config or SSHBoxConfig()
    try:
        _check_size(os.path.getsize(path), config, path)
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise FileAccessError(f"Failed to read {path}: {e}") from e


def write_output(path: str, data: bytes) -> None:
    """Atomically write data to path.

    The data goes to a temporary file in the target directory which then
    replaces the target, so a failed write never leaves partial output.

    Raises:
        FileAccessError: If the file cannot be written.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    replaced = False
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".sshbox-", dir=directory)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_path, OUTPUT_FILE_MODE)
        os.replace(tmp_path, path)
        replaced = True
    except OSError as e:
        raise FileAccessError(f"Failed to write {path}: {e}") from e
    finally:
        if tmp_path is not None and not replaced:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)


def encrypt_bytes(
    message: bytes,
    pub: PublicKeyMaterial,
    *,
    armor: bool = False,
    config: SSHBoxConfig | None = None,
) -> bytes:
    """Seal a message and serialize the container.

    Args:
        message: The plaintext.
        pub: The recipient's public key.
        armor: Whether to produce armored output.
        config: Size and armor settings.

    Returns:
        The serialized container.
    """
    config = config or SSHBoxConfig()
    _check_size(len(message), config, "Message")
    return encode_container(seal(message, pub), armor=armor, width=config.armor_width)


def decrypt_bytes(
    data: bytes,
    priv: PrivateKeyMaterial,
    *,
    config: SSHBoxConfig | None = None,
) -> bytes:
    """Decode a serialized container and open it.

    Args:
        data: DER or armored container.
        priv: The recipient's private key.
        config: Size settings.

    Returns:
        The plaintext.
    """
    config = config or SSHBoxConfig()
    _check_size(len(data), config, "Container")
    return open_box(decode_container(data), priv)


def encrypt_file(
    source: str,
    target: str,
    key_name: str,
    *,
    armor: bool = False,
    config: SSHBoxConfig | None = None,
) -> None:
    """Encrypt a file to an SSH public key.

    Args:
        source: Path of the plaintext file.
        target: Path to write the container to.
        key_name: Public key file path or URL.
        armor: Whether to produce armored output.
        config: Runtime configuration.

    Raises:
        SSHBoxError: If any step fails. Nothing is written in that case.
    """
    config = config or SSHBoxConfig()
    pub = load_public_key(key_name, config)
    message = read_input(source, config)
    package = encrypt_bytes(message, pub, armor=armor, config=config)
    write_output(target, package)
    logger.info("Encrypted %s to %s (%d bytes)", source, target, len(package))


def decrypt_file(
    source: str,
    target: str,
    key_name: str,
    *,
    config: SSHBoxConfig | None = None,
) -> None:
    """Decrypt a container file with a local SSH private key.

    Args:
        source: Path of the container file, DER or armored.
        target: Path to write the plaintext to.
        key_name: Private key file path.
        config: Runtime configuration.

    Raises:
        SSHBoxError: If any step fails. Nothing is written in that case.
    """
    config = config or SSHBoxConfig()
    priv = load_private_key(key_name, config)
    package = read_input(source, config)
    message = decrypt_bytes(package, priv, config=config)
    write_output(target, message)
    logger.info("Decrypted %s to %s (%d bytes)", source, target, len(message))
